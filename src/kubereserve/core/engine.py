#!/usr/bin/env python3
"""
KUBERESERVE ENGINE - The Orchestrator
-------------------------------------
Chains the document wrapper and the calculator:
parse -> compute kubeReserved.cpu -> set -> render.

`rewrite()` works purely on bytes and lets every error propagate.
`apply_file()` adds the disk side (backup, atomic write) and turns
failures into report dicts for the CLI.

Author: KubeReserve Team
Date: 2026-10-19
"""

import logging
import os
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from kubereserve.core.errors import FieldTypeError, KubeReserveError, PathError
from kubereserve.document.codec import YamlCodec
from kubereserve.document.kubeconfig import KubeletConfig
from kubereserve.host.cpus import detect_cpu_count
from kubereserve.reservation.calculator import compute_reserved_cpu
from kubereserve.reservation.quantity import allocatable_milli_cpu

logger = logging.getLogger("kubereserve.engine")

BACKUP_SUFFIX = ".kubereserve.backup"
TEMP_SUFFIX = ".kubereserve.tmp"


@dataclass
class ReservationResult:
    """Outcome of a single rewrite."""
    cpus: int
    previous: Optional[str]     # None when kubeReserved.cpu was absent or not a string
    reserved: str
    allocatable_milli_cpu: int
    content: bytes
    changed: bool


class ReservationEngine:
    """
    Applies GKE's kubeReserved.cpu formula to kubelet config documents.
    """

    def __init__(self, cpus: Optional[int] = None):
        """
        Args:
            cpus: Logical CPU count to size for. Detected from the host when omitted.
        """
        self.cpus = detect_cpu_count() if cpus is None else cpus
        if self.cpus < 0:
            raise ValueError(f"CPU count must be non-negative, got {self.cpus}")
        self.codec = YamlCodec()

    def rewrite(self, data: bytes, cpus: Optional[int] = None) -> ReservationResult:
        """Returns `data` with kubeReserved.cpu recomputed for `cpus`."""
        cpus = self.cpus if cpus is None else cpus
        config = KubeletConfig.from_bytes(data, codec=self.codec)

        try:
            previous = config.get_reserved_cpu()
        except (PathError, FieldTypeError):
            previous = None

        reserved = compute_reserved_cpu(config, cpus)
        config.set_reserved_cpu(reserved)
        content = config.to_bytes()

        logger.debug(f"kubeReserved.cpu: {previous} -> {reserved} ({cpus} CPUs)")
        return ReservationResult(
            cpus=cpus,
            previous=previous,
            reserved=reserved,
            allocatable_milli_cpu=allocatable_milli_cpu(cpus, reserved),
            content=content,
            changed=content != data,
        )

    def apply_file(self, path: str, dry_run: bool = True, backup: bool = True) -> Dict[str, Any]:
        """
        Rewrites a kubelet-config.yaml on disk and reports what happened.
        """
        full_path = Path(path).resolve()
        if not full_path.is_file():
            return self._file_error(path, "FILE_NOT_FOUND", f"Path missing: {full_path}")

        try:
            original = full_path.read_bytes()
            result = self.rewrite(original)
        except (KubeReserveError, OSError, ValueError) as e:
            logger.error(f"Error processing {path}: {e}")
            return self._file_error(path, "ENGINE_ERROR", str(e))

        report = {
            "file_path": str(path),
            "success": True,
            "status": self._derive_status(result.changed, dry_run),
            "cpus": result.cpus,
            "previous": result.previous,
            "reserved": result.reserved,
            "allocatable": result.allocatable_milli_cpu,
            "original_content": original.decode("utf-8", errors="replace"),
            "updated_content": result.content.decode("utf-8") if result.changed else None,
            "written": False,
            "backup_created": None,
            "timestamp": time.time(),
        }

        if dry_run or not result.changed:
            return report

        if backup:
            backup_path = self._create_unique_backup(full_path)
            try:
                shutil.copy2(full_path, backup_path)
                report["backup_created"] = str(backup_path)
            except OSError as e:
                report["backup_warning"] = f"Backup failed: {e}"
                logger.warning(report["backup_warning"])

        try:
            self._atomic_write(full_path, result.content)
            report["written"] = True
            logger.info(f"Set kubeReserved.cpu={result.reserved} in {full_path}")
        except OSError as e:
            logger.error(f"Write failed for {full_path}: {e}")
            report["write_error"] = str(e)
            report["success"] = False
            report["status"] = "WRITE_FAILED"

        return report

    def _derive_status(self, changed: bool, dry: bool) -> str:
        if not changed: return "UNCHANGED"
        if dry: return "PREVIEW"
        return "UPDATED"

    def _atomic_write(self, target_path: Path, content: bytes):
        temp_file = target_path.with_name(target_path.name + TEMP_SUFFIX)
        try:
            temp_file.write_bytes(content)
            shutil.copymode(target_path, temp_file)
            os.replace(temp_file, target_path)
        except OSError:
            if temp_file.exists(): temp_file.unlink()
            raise

    def _create_unique_backup(self, target_path: Path) -> Path:
        backup_path = target_path.with_name(target_path.name + BACKUP_SUFFIX)
        counter = 1
        while backup_path.exists():
            backup_path = target_path.with_name(f"{target_path.name}-{counter}{BACKUP_SUFFIX}")
            counter += 1
        return backup_path

    def _file_error(self, path: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": str(path), "status": status, "error": error,
            "success": False, "written": False,
        }
