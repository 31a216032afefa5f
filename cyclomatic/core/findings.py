"""
Result data structures for the complexity checker.

This module defines how functions are identified, both by their
syntax-level name token and by their resolved identity, and how
per-unit scores and diagnostics are reported.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
import json


@dataclass(frozen=True)
class Identifier:
    """The name token of a function definition in one syntax unit."""
    name: str
    file_path: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        return f"{self.name} ({self.file_path}:{self.line}:{self.column + 1})"


@dataclass(frozen=True)
class FunctionIdentity:
    """
    Resolved identity of a function.

    Unlike an Identifier, this does not depend on where the function's
    source lives, so any unit that refers to the function can compute the
    same key.
    """
    language: str
    package: str
    qualname: str

    @property
    def key(self) -> str:
        if self.package:
            return f"{self.language}:{self.package}.{self.qualname}"
        return f"{self.language}:{self.qualname}"

    @property
    def name(self) -> str:
        """The function's own name, without package or enclosing scopes."""
        return self.qualname.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.key


@dataclass
class CodeLocation:
    """Represents a location in source code."""
    file_path: str
    start_line: int
    end_line: int
    start_column: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        return f"{self.file_path}:{self.start_line}:{self.start_column + 1}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "start_column": self.start_column,
            "end_column": self.end_column,
        }


@dataclass
class Diagnostic:
    """A function whose cyclomatic complexity exceeded the configured limit."""
    message: str
    location: CodeLocation
    function: str
    complexity: int
    limit: int
    identity: Optional[FunctionIdentity] = None
    rule_id: str = "cyclomatic"

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "rule_id": self.rule_id,
            "message": self.message,
            "function": self.function,
            "complexity": self.complexity,
            "limit": self.limit,
            "location": self.location.to_dict(),
        }
        if self.identity is not None:
            result["identity"] = self.identity.key
        return result


@dataclass
class UnitResult:
    """Scores and diagnostics for one analyzed syntax unit."""
    file_path: str
    language: str
    complexities: Dict[Identifier, int] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def score_of(self, name: str) -> Optional[int]:
        """Return the score of the first function named ``name``."""
        for identifier, score in self.complexities.items():
            if identifier.name == name:
                return score
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "language": self.language,
            "functions": [
                {
                    "name": identifier.name,
                    "line": identifier.line,
                    "column": identifier.column,
                    "complexity": score,
                }
                for identifier, score in sorted(
                    self.complexities.items(), key=lambda item: (item[0].line, item[0].column)
                )
            ],
        }


@dataclass
class CheckResult:
    """Results from a complete check run."""
    units: List[UnitResult]
    diagnostics: List[Diagnostic]
    files_checked: int
    check_time_seconds: float
    languages_detected: List[str]
    errors: List[str] = field(default_factory=list)

    @property
    def functions_checked(self) -> int:
        return sum(len(unit.complexities) for unit in self.units)

    @property
    def total_diagnostics(self) -> int:
        return len(self.diagnostics)

    @property
    def max_complexity(self) -> int:
        scores = [score for unit in self.units for score in unit.complexities.values()]
        return max(scores) if scores else 0

    @property
    def average_complexity(self) -> float:
        scores = [score for unit in self.units for score in unit.complexities.values()]
        return round(sum(scores) / len(scores), 2) if scores else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "files_checked": self.files_checked,
                "functions_checked": self.functions_checked,
                "check_time_seconds": self.check_time_seconds,
                "languages_detected": self.languages_detected,
                "total_diagnostics": self.total_diagnostics,
                "max_complexity": self.max_complexity,
                "average_complexity": self.average_complexity,
            },
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "units": [unit.to_dict() for unit in self.units],
            "errors": self.errors,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
