"""
Base classes shared by the language front ends.

Every front end turns source text into a tree of SyntaxNode objects using
one normalized vocabulary of node types, so the complexity check never
sees a language-specific tree.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, List, Dict, Iterator

from cyclomatic.core.findings import CodeLocation, FunctionIdentity, Identifier


# Normalized node types produced by the front ends
FUNCTION_DEFINITION = "function_definition"
FUNCTION_LITERAL = "function_literal"
IF_STATEMENT = "if_statement"
IF_EXPRESSION = "if_expression"
FOR_LOOP = "for_loop"
WHILE_LOOP = "while_loop"
COMM_CLAUSE = "comm_clause"
CASE_CLAUSE = "case_clause"
BINARY_EXPRESSION = "binary_expression"


@dataclass
class SyntaxNode:
    """
    Language-independent syntax tree node.

    ``attributes`` carries the few facts scoring needs beyond the type:
    ``values`` for case clauses and ``operator`` for binary expressions.
    Function definitions also carry their name token in ``identifier``.
    """
    type: str
    value: Optional[str] = None
    start_line: int = 0
    end_line: int = 0
    start_column: int = 0
    end_column: int = 0
    children: List["SyntaxNode"] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)
    identifier: Optional[Identifier] = None

    def __repr__(self) -> str:
        return f"SyntaxNode(type={self.type!r}, value={self.value!r}, line={self.start_line})"

    def find_all(self, node_type: str) -> Iterator["SyntaxNode"]:
        """Find all descendant nodes of a given type."""
        stack = [self]
        while stack:
            node = stack.pop()
            if node.type == node_type:
                yield node
            stack.extend(reversed(node.children))

    def location(self, file_path: str) -> CodeLocation:
        return CodeLocation(
            file_path=file_path,
            start_line=self.start_line,
            end_line=self.end_line,
            start_column=self.start_column,
            end_column=self.end_column,
        )


def unique_name(name: str, seen: Dict[str, int]) -> str:
    """
    Return ``name`` the first time it is seen in a unit, ``name#N`` after.

    Go allows several ``init`` and ``_`` functions per package and Python
    allows redefining a function; each definition still needs its own fact.
    """
    count = seen.get(name, 0) + 1
    seen[name] = count
    if count == 1:
        return name
    return f"{name}#{count}"


class Resolver(ABC):
    """Maps function name tokens to resolved function identities."""

    @abstractmethod
    def resolve(self, identifier: Identifier) -> FunctionIdentity:
        """
        Resolve a function definition's name token.

        Raises:
            ResolutionError: if the identifier does not name a function.
        """
        pass


@dataclass
class SyntaxUnit:
    """One parsed source file, ready to be checked."""
    file_path: str
    language: str
    source: str
    root: SyntaxNode
    resolver: Resolver

    def function_definitions(self) -> List[SyntaxNode]:
        return list(self.root.find_all(FUNCTION_DEFINITION))


class BaseParser(ABC):
    """
    Base class for language front ends.

    Each parser turns source code into a SyntaxUnit whose tree uses the
    normalized node types defined in this module.
    """

    @property
    @abstractmethod
    def language(self) -> str:
        """Return the language this parser handles."""
        pass

    @abstractmethod
    def parse(self, source: str, file_path: str = "<unknown>") -> SyntaxUnit:
        """
        Parse source code into a syntax unit.

        Raises:
            ParsingError: if the source is not syntactically valid.
        """
        pass
