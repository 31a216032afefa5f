"""Core check engine and data structures."""

from cyclomatic.core.findings import (
    CheckResult, CodeLocation, Diagnostic, FunctionIdentity, Identifier, UnitResult,
)
from cyclomatic.core.errors import (
    AnalysisError, ConfigurationError, CyclomaticError, ParsingError, ResolutionError,
)
from cyclomatic.core.facts import FactStore, JsonFactStore, MemoryFactStore
from cyclomatic.core.complexity import ComplexityPass, analyze, score_delta
from cyclomatic.core.engine import CheckEngine

__all__ = [
    "CheckResult",
    "CodeLocation",
    "Diagnostic",
    "FunctionIdentity",
    "Identifier",
    "UnitResult",
    "AnalysisError",
    "ConfigurationError",
    "CyclomaticError",
    "ParsingError",
    "ResolutionError",
    "FactStore",
    "JsonFactStore",
    "MemoryFactStore",
    "ComplexityPass",
    "analyze",
    "score_delta",
    "CheckEngine",
]
