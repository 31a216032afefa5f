"""
Text output formatter for human-readable results.

Diagnostics are printed one per line as ``path:line:col: message`` so
editors and CI log parsers can jump to them.
"""

import sys
from typing import List

from cyclomatic.core.findings import CheckResult, Diagnostic


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"


def supports_color() -> bool:
    """Check if the terminal supports color output."""
    if not hasattr(sys.stdout, "isatty"):
        return False
    if not sys.stdout.isatty():
        return False
    return True


class TextFormatter:
    """
    Formats check results for the terminal.
    """

    def __init__(self, use_color: bool = True, verbose: bool = False, show_all: bool = False):
        self.use_color = use_color and supports_color()
        self.verbose = verbose
        self.show_all = show_all

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def format_diagnostic(self, diagnostic: Diagnostic) -> str:
        """Format a single diagnostic."""
        location = self._color(str(diagnostic.location), Colors.BOLD)
        return f"{location}: {self._color(diagnostic.message, Colors.YELLOW)}"

    def format_result(self, result: CheckResult) -> str:
        """Format a complete check result."""
        lines: List[str] = [self.format_diagnostic(d) for d in result.diagnostics]

        if self.show_all:
            lines.extend(self._format_scores(result))

        if result.errors:
            for error in result.errors:
                lines.append(self._color(f"error: {error}", Colors.RED))

        if self.verbose:
            lines.extend(self._format_summary(result))

        return "\n".join(lines)

    def _format_scores(self, result: CheckResult) -> List[str]:
        lines = [""]
        lines.append(self._color("Complexity by function", Colors.BOLD))
        lines.append(self._color("-" * 60, Colors.DIM))

        for unit in result.units:
            ordered = sorted(unit.complexities.items(), key=lambda item: (item[0].line, item[0].column))
            for identifier, score in ordered:
                where = f"{identifier.file_path}:{identifier.line}"
                lines.append(f"  {score:4}  {identifier.name:<30} {self._color(where, Colors.DIM)}")

        return lines

    def _format_summary(self, result: CheckResult) -> List[str]:
        lines = [""]
        lines.append(self._color("Summary", Colors.BOLD))
        lines.append(self._color("-" * 40, Colors.DIM))
        lines.append(f"  Files checked:     {result.files_checked}")
        lines.append(f"  Functions:         {result.functions_checked}")
        lines.append(f"  Languages:         {', '.join(result.languages_detected)}")
        lines.append(f"  Max complexity:    {result.max_complexity}")
        lines.append(f"  Avg complexity:    {result.average_complexity}")
        lines.append(f"  Check time:        {result.check_time_seconds:.2f}s")

        if result.total_diagnostics == 0:
            lines.append(self._color("  No function exceeds the limit.", Colors.GREEN))
        else:
            lines.append(self._color(f"  Over limit:        {result.total_diagnostics}", Colors.YELLOW))

        return lines
