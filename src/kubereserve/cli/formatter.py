# src/kubereserve/cli/formatter.py
import difflib
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

console = Console()


def format_cores(milli_cpus: Optional[int]) -> str:
    if milli_cpus is None:
        return "-"
    return f"{milli_cpus / 1000:.3f}"


class KubeFormatter:
    """
    Renders diffs and reservation reports for the CLI.
    """

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console

    def display_diff(self, original_text: str, updated_text: str, file_name: str):
        """
        Renders a colorized unified diff between the current config
        and the rewritten one.
        """
        if not updated_text or not original_text:
            return

        diff_list = list(difflib.unified_diff(
            original_text.splitlines(),
            updated_text.splitlines(),
            fromfile=f"original/{file_name}",
            tofile=f"updated/{file_name}",
            lineterm=""
        ))

        if not diff_list:
            self.console.print(f"[dim]ℹ No changes needed for {file_name}.[/dim]")
            return

        syntax = Syntax("\n".join(diff_list), "diff", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"Proposed Update: {file_name}", border_style="green"))

    def print_final_table(self, reports: List[Dict[str, Any]]):
        """
        Builds the summary table shown at the end of a run.
        """
        table = Table(title="KubeReserve Report", show_header=True, header_style="bold magenta")
        table.add_column("File Path", style="dim")
        table.add_column("CPUs", justify="right")
        table.add_column("Current")
        table.add_column("Computed")
        table.add_column("Allocatable", justify="right")
        table.add_column("Status")
        table.add_column("Result", justify="center")

        for r in reports:
            if r.get("error"):
                self.console.print(f"[bold red]Error in {r.get('file_path')}:[/bold red] {r['error']}")
            table.add_row(
                str(r.get("file_path")),
                str(r.get("cpus", "-")),
                str(r.get("previous") or "-"),
                str(r.get("reserved", "-")),
                format_cores(r.get("allocatable")),
                str(r.get("status", "FAILED")),
                "✅" if r.get("success") else "❌",
            )

        self.console.print(table)
