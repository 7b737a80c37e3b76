#!/usr/bin/env python3
"""
KUBERESERVE CLI
---------------
Resizes kubeReserved.cpu in a GKE kubelet-config.yaml to match the
CPUs the node actually has.

Author: KubeReserve Team
Date: 2026-10-19
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.logging import RichHandler
from rich.panel import Panel

from kubereserve.cli.formatter import KubeFormatter, console
from kubereserve.core.engine import ReservationEngine

DEFAULT_CONFIG_PATH = "/home/kubernetes/kubelet-config.yaml"
VERSION = "kubereserve v1.0.0"


class KubeReserveCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubereserve",
            description="KubeReserve - Recompute GKE kubeReserved.cpu for the host's CPUs",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = KubeFormatter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-V", "--version", action="version", version=VERSION)
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        common = argparse.ArgumentParser(add_help=False)
        common.add_argument("path", nargs="?", default=DEFAULT_CONFIG_PATH,
                            help=f"kubelet config file (default: {DEFAULT_CONFIG_PATH})")
        common.add_argument("--cpus", type=int, default=None,
                            help="Logical CPU count (default: $KUBERESERVE_CPUS or detected)")

        subparsers.add_parser("show", parents=[common], help="Show current and computed kubeReserved.cpu")

        apply_parser = subparsers.add_parser("apply", parents=[common], help="Rewrite kubeReserved.cpu in place")
        apply_parser.add_argument("--dry-run", action="store_true", help="Preview results without writing")
        apply_parser.add_argument("--diff", action="store_true", help="Display a unified diff of the change")
        apply_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
        apply_parser.add_argument("--no-backup", action="store_true", help="Skip the .kubereserve.backup copy")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(f"[bold cyan]{VERSION}[/bold cyan]", title=f"[bold white]{subtitle}[/bold white]",
                                border_style="cyan"))

    def _confirm_action(self, args: argparse.Namespace) -> bool:
        """Safety gate before writing to disk."""
        if args.dry_run or args.yes:
            return True
        choice = console.input(f"\n[bold yellow]Write changes to {args.path}? (y/N): [/bold yellow]").lower()
        return choice == 'y'

    def _cpu_count_error(self, args: argparse.Namespace) -> bool:
        if args.cpus is not None and args.cpus < 0:
            console.print(f"[bold red]Error:[/bold red] --cpus must be non-negative, got {args.cpus}")
            return True
        return False

    def _run_show(self, args: argparse.Namespace) -> int:
        if self._cpu_count_error(args):
            return 2
        engine = ReservationEngine(cpus=args.cpus)
        report = engine.apply_file(args.path, dry_run=True)
        self.formatter.print_final_table([report])
        return 0 if report.get("success") else 1

    def _run_apply(self, args: argparse.Namespace) -> int:
        if self._cpu_count_error(args):
            return 2
        engine = ReservationEngine(cpus=args.cpus)

        preview = engine.apply_file(args.path, dry_run=True)
        if not preview.get("success"):
            self.formatter.print_final_table([preview])
            return 1

        if args.diff and preview.get("updated_content"):
            self.formatter.display_diff(preview["original_content"], preview["updated_content"], args.path)

        if args.dry_run or preview["status"] == "UNCHANGED":
            self.formatter.print_final_table([preview])
            return 0

        if not self._confirm_action(args):
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            return 1

        report = engine.apply_file(args.path, dry_run=False, backup=not args.no_backup)
        self.formatter.print_final_table([report])
        if report.get("backup_created"):
            console.print(f"[dim]Backup: {report['backup_created']}[/dim]")
        return 0 if report.get("success") else 1

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

        if args.command == "show":
            self.print_header("Reserved CPU")
            return self._run_show(args)
        if args.command == "apply":
            self.print_header("Reserved CPU Update")
            return self._run_apply(args)

        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeReserveCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
