#!/usr/bin/env python3
"""
KUBERESERVE HOST - CPU discovery
--------------------------------
Author: KubeReserve Team
Date: 2026-10-19
"""

import logging
import os
from typing import Mapping, Optional

logger = logging.getLogger("kubereserve.host")

CPU_COUNT_ENV = "KUBERESERVE_CPUS"


def detect_cpu_count(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Returns the number of logical CPUs to size the reservation for.
    KUBERESERVE_CPUS wins over what the OS reports.
    """
    environ = os.environ if environ is None else environ
    raw = environ.get(CPU_COUNT_ENV, "").strip()
    if raw:
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Invalid {CPU_COUNT_ENV} '{raw}'. Falling back to os.cpu_count()")
        else:
            if value >= 0:
                return value
            logger.warning(f"Negative {CPU_COUNT_ENV} '{raw}'. Falling back to os.cpu_count()")
    return os.cpu_count() or 1
