"""
JSON output formatter for machine-readable results.
"""

import json

from cyclomatic.core.findings import CheckResult, Diagnostic


class JSONFormatter:
    """
    Formats check results as JSON for machine consumption.
    """

    def __init__(self, indent: int = 2, show_all: bool = True):
        self.indent = indent
        self.show_all = show_all

    def format_result(self, result: CheckResult) -> str:
        """Format a complete check result as JSON."""
        data = result.to_dict()

        if not self.show_all:
            data.pop("units")

        return json.dumps(data, indent=self.indent, default=str)

    def format_diagnostic(self, diagnostic: Diagnostic) -> str:
        """Format a single diagnostic as JSON."""
        return json.dumps(diagnostic.to_dict(), indent=self.indent, default=str)
