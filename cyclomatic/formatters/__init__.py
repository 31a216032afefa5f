"""
Output formatters for check results.

Provides multiple output formats including:
- Human-readable text output
- JSON for machine processing
- SARIF for IDE integration
"""

from cyclomatic.formatters.cli import TextFormatter
from cyclomatic.formatters.json_formatter import JSONFormatter
from cyclomatic.formatters.sarif import SARIFFormatter

__all__ = [
    "TextFormatter",
    "JSONFormatter",
    "SARIFFormatter",
    "get_formatter",
]


def get_formatter(format_name: str):
    """Get a formatter by name."""
    formatters = {
        "text": TextFormatter,
        "cli": TextFormatter,
        "json": JSONFormatter,
        "sarif": SARIFFormatter,
    }

    formatter_class = formatters.get(format_name.lower())
    if formatter_class:
        return formatter_class()

    raise ValueError(f"Unknown format: {format_name}")
