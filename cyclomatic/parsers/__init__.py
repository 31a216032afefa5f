"""
Language front ends.

Each front end parses one source file into a SyntaxUnit: a normalized
syntax tree plus a resolver for the functions it defines.
"""

from typing import Dict, List, Type

from cyclomatic.core.errors import UnsupportedLanguageError
from cyclomatic.parsers.base import BaseParser, Resolver, SyntaxNode, SyntaxUnit

# Registry of available parsers
_parsers: Dict[str, Type[BaseParser]] = {}

_ALIASES = {
    "py": "python",
    "python3": "python",
    "golang": "go",
}


def register_parser(language: str):
    """Decorator to register a parser for a language."""
    def decorator(cls: Type[BaseParser]) -> Type[BaseParser]:
        _parsers[language.lower()] = cls
        return cls
    return decorator


def get_parser(language: str) -> BaseParser:
    """Get a parser instance for a language."""
    language = language.lower()
    language = _ALIASES.get(language, language)

    if language not in _parsers:
        raise UnsupportedLanguageError(language, list_supported_languages())

    return _parsers[language]()


def list_supported_languages() -> List[str]:
    """List all languages with registered parsers."""
    return sorted(_parsers.keys())


# Import parsers to register them
from cyclomatic.parsers.python_parser import PythonParser  # noqa: E402
from cyclomatic.parsers.go_parser import GoParser  # noqa: E402

__all__ = [
    "BaseParser",
    "Resolver",
    "SyntaxNode",
    "SyntaxUnit",
    "get_parser",
    "register_parser",
    "list_supported_languages",
    "PythonParser",
    "GoParser",
]
