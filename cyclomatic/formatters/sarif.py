"""
SARIF output formatter for IDE and code-scanning integration.

SARIF (Static Analysis Results Interchange Format) is a standard
format for static analysis tool output, supported by many IDEs
and code review tools.
"""

import json
from typing import Dict, Any
from datetime import datetime, timezone

from cyclomatic import __version__
from cyclomatic.core.findings import CheckResult, Diagnostic


RULE = {
    "id": "cyclomatic",
    "name": "CyclomaticComplexity",
    "shortDescription": {
        "text": "Function exceeds the cyclomatic complexity limit",
    },
    "fullDescription": {
        "text": "Cyclomatic complexity is one plus the number of decision points in a function. "
                "Functions above the limit are hard to test and maintain.",
    },
    "defaultConfiguration": {
        "level": "warning",
    },
    "helpUri": "https://en.wikipedia.org/wiki/Cyclomatic_complexity",
}


class SARIFFormatter:
    """
    Formats check results in SARIF format.

    SARIF is supported by:
    - GitHub Code Scanning
    - VS Code SARIF Viewer
    - Azure DevOps
    """

    SARIF_VERSION = "2.1.0"
    SCHEMA_URI = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

    def format_result(self, result: CheckResult) -> str:
        """Format a complete check result in SARIF format."""
        sarif = {
            "$schema": self.SCHEMA_URI,
            "version": self.SARIF_VERSION,
            "runs": [self._create_run(result)],
        }

        return json.dumps(sarif, indent=2)

    def _create_run(self, result: CheckResult) -> Dict[str, Any]:
        return {
            "tool": {
                "driver": {
                    "name": "cyclomatic",
                    "version": __version__,
                    "rules": [RULE],
                }
            },
            "results": [self._create_result(d) for d in result.diagnostics],
            "invocations": [self._create_invocation(result)],
        }

    def _create_result(self, diagnostic: Diagnostic) -> Dict[str, Any]:
        """Create a SARIF result object from a diagnostic."""
        location = diagnostic.location
        result = {
            "ruleId": diagnostic.rule_id,
            "level": "warning",
            "message": {
                "text": diagnostic.message,
            },
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {
                            "uri": location.file_path,
                        },
                        "region": {
                            "startLine": location.start_line,
                            "endLine": location.end_line,
                            "startColumn": location.start_column + 1,  # SARIF is 1-indexed
                            "endColumn": location.end_column + 1,
                        },
                    },
                }
            ],
            "properties": {
                "complexity": diagnostic.complexity,
                "limit": diagnostic.limit,
            },
        }

        if diagnostic.identity is not None:
            result["locations"][0]["logicalLocations"] = [
                {
                    "name": diagnostic.function,
                    "fullyQualifiedName": diagnostic.identity.key,
                    "kind": "function",
                }
            ]

        return result

    def _create_invocation(self, result: CheckResult) -> Dict[str, Any]:
        """Create a SARIF invocation object."""
        return {
            "executionSuccessful": len(result.errors) == 0,
            "endTimeUtc": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "toolExecutionNotifications": [
                {
                    "message": {
                        "text": error,
                    },
                    "level": "error",
                }
                for error in result.errors
            ],
        }
