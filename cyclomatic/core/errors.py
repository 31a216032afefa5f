"""
Exception hierarchy for the complexity checker.

Analysis errors abort the syntax unit they occur in; the engine records
them and moves on to the next unit.
"""

from typing import Dict, List, Optional


class CyclomaticError(Exception):
    """Base exception for all checker errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(CyclomaticError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str):
        super().__init__(
            f"Invalid configuration value for '{key}': {value!r}",
            details={"reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class AnalysisError(CyclomaticError):
    """Base class for errors that abort the analysis of one unit."""
    pass


class ParsingError(AnalysisError):
    """Raised when a source file cannot be parsed into a syntax tree."""

    def __init__(self, file_path: str, language: str, reason: str):
        super().__init__(
            f"Failed to parse {language} file: {file_path}",
            details={"reason": reason},
        )
        self.file_path = file_path
        self.language = language
        self.reason = reason


class ResolutionError(AnalysisError):
    """
    Raised when a function definition does not resolve to a function identity.

    This is a broken contract between the front end and the checker, not a
    problem with the analyzed code.
    """

    def __init__(self, identifier: object, reason: str):
        super().__init__(
            f"Cannot resolve function definition {identifier}",
            details={"reason": reason},
        )
        self.identifier = identifier
        self.reason = reason


class UnsupportedLanguageError(AnalysisError):
    """Raised when no front end exists for a language."""

    def __init__(self, language: str, supported_languages: List[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages
