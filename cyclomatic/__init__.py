"""
Cyclomatic Complexity Checker

Computes the McCabe cyclomatic complexity of every function in Python and
Go sources, exports each score as a fact keyed by the function's identity,
and reports functions that exceed a configurable limit.
"""

__version__ = "1.0.0"
__author__ = "Cyclomatic Team"

from cyclomatic.core.engine import CheckEngine
from cyclomatic.core.findings import CheckResult, Diagnostic, FunctionIdentity
from cyclomatic.config import CheckConfig

__all__ = [
    "CheckEngine",
    "CheckResult",
    "Diagnostic",
    "FunctionIdentity",
    "CheckConfig",
]
