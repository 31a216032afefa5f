"""
Python front end using Python's built-in ast and symtable modules.
"""

import ast as python_ast
import re
import symtable
from pathlib import Path
from typing import Dict, Optional, List, Tuple

from cyclomatic.core.errors import ParsingError, ResolutionError
from cyclomatic.core.findings import FunctionIdentity, Identifier
from cyclomatic.parsers import register_parser
from cyclomatic.parsers.base import (
    BaseParser, Resolver, SyntaxNode, SyntaxUnit, unique_name,
    BINARY_EXPRESSION, CASE_CLAUSE, FOR_LOOP, FUNCTION_DEFINITION,
    FUNCTION_LITERAL, IF_EXPRESSION, IF_STATEMENT, WHILE_LOOP,
)


TYPE_MAP = {
    "Module": "module",
    "FunctionDef": FUNCTION_DEFINITION,
    "AsyncFunctionDef": FUNCTION_DEFINITION,
    "Lambda": FUNCTION_LITERAL,
    "ClassDef": "class_definition",
    "If": IF_STATEMENT,
    "IfExp": IF_EXPRESSION,
    "For": FOR_LOOP,
    "AsyncFor": FOR_LOOP,
    "While": WHILE_LOOP,
    "Match": "match_statement",
    "match_case": CASE_CLAUSE,
}

_BOOL_OPERATORS = {
    python_ast.And: "and",
    python_ast.Or: "or",
}

# (ast node, list its converted node is appended to)
_Pending = Tuple[python_ast.AST, List[SyntaxNode]]


def module_name_for(file_path: str) -> str:
    """
    Derive the dotted module name of a file.

    Parent directories are included for as long as they are packages, so
    the same file gets the same name wherever the check is started from.
    """
    path = Path(file_path)
    parts = [] if path.stem == "__init__" else [path.stem]
    parent = path.parent
    while (parent / "__init__.py").is_file():
        parts.insert(0, parent.name)
        if parent.parent == parent:
            break
        parent = parent.parent
    return ".".join(parts) or path.stem


class SymtableResolver(Resolver):
    """
    Resolves function name tokens through the compiler's symbol tables.

    Each definition is matched to its symbol table by name and line, which
    also yields the qualified name (``Outer.method``,
    ``outer.<locals>.inner``). A name defined again in the same scope gets
    a ``#N`` suffix in definition order.
    """

    def __init__(self, source: str, file_path: str, module: str):
        self.file_path = file_path
        self.module = module
        self._index: Dict[Tuple[str, int], Tuple[str, str]] = {}
        self._collect(symtable.symtable(source, file_path, "exec"), "", {})

    def _collect(self, table: symtable.SymbolTable, prefix: str, seen: Dict[str, int]) -> None:
        for child in table.get_children():
            kind = str(child.get_type())
            name = child.get_name()

            if kind == "function":
                qualname = unique_name(f"{prefix}{name}", seen)
                self._index[(name, child.get_lineno())] = (kind, qualname)
                self._collect(child, f"{qualname}.<locals>.", seen)
            elif kind == "class":
                qualname = unique_name(f"{prefix}{name}", seen)
                self._index[(name, child.get_lineno())] = (kind, qualname)
                self._collect(child, f"{qualname}.", seen)
            else:
                # type parameter and annotation scopes add no name
                self._collect(child, prefix, seen)

    def resolve(self, identifier: Identifier) -> FunctionIdentity:
        entry = self._index.get((identifier.name, identifier.line))
        if entry is None:
            raise ResolutionError(identifier, "no symbol table matches this definition")

        kind, qualname = entry
        if kind != "function":
            raise ResolutionError(identifier, f"symbol table is a {kind}, not a function")

        return FunctionIdentity(language="python", package=self.module, qualname=qualname)


@register_parser("python")
class PythonParser(BaseParser):
    """
    Parser for Python source code using the built-in ast module.
    """

    @property
    def language(self) -> str:
        return "python"

    def parse(self, source: str, file_path: str = "<unknown>") -> SyntaxUnit:
        """Parse Python source code into a normalized syntax unit."""
        try:
            tree = python_ast.parse(source, filename=file_path)
            resolver = SymtableResolver(source, file_path, module_name_for(file_path))
        except (SyntaxError, ValueError, RecursionError, MemoryError) as e:
            raise ParsingError(file_path, self.language, str(e) or type(e).__name__) from e

        lines = source.splitlines()
        root = self._convert_tree(tree, file_path, lines)

        return SyntaxUnit(
            file_path=file_path,
            language=self.language,
            source=source,
            root=root,
            resolver=resolver,
        )

    def _convert_tree(self, tree: python_ast.AST, file_path: str, lines: List[str]) -> SyntaxNode:
        """
        Convert a Python AST into our normalized SyntaxNode tree.

        Uses an explicit stack; long operator chains nest thousands of
        levels deep.
        """
        converted: List[SyntaxNode] = []
        stack: List[_Pending] = [(tree, converted)]

        while stack:
            node, siblings = stack.pop()

            if isinstance(node, python_ast.BoolOp):
                top, operands = self._expand_bool_op(node)
                siblings.append(top)
                stack.extend(reversed(operands))
                continue

            syntax_node = SyntaxNode(
                type=self._get_node_type(node),
                value=self._get_node_value(node),
                attributes=self._get_attributes(node),
                **self._position(node),
            )

            if isinstance(node, (python_ast.FunctionDef, python_ast.AsyncFunctionDef)):
                syntax_node.identifier = self._function_identifier(node, file_path, lines)

            siblings.append(syntax_node)
            children = list(python_ast.iter_child_nodes(node))
            stack.extend((child, syntax_node.children) for child in reversed(children))

        return converted[0]

    def _expand_bool_op(self, node: python_ast.BoolOp) -> Tuple[SyntaxNode, List[_Pending]]:
        """
        Expand ``a and b and c`` into one binary node per operator.

        Python folds a chain of the same operator into a single BoolOp; the
        normalized tree keeps one left-nested binary_expression per operator
        occurrence. Returns the outermost node and the operands still to be
        converted, each paired with the node it belongs under.
        """
        operator = _BOOL_OPERATORS[type(node.op)]
        position = self._position(node)

        left = SyntaxNode(type=BINARY_EXPRESSION, value=operator, attributes={"operator": operator}, **position)
        operands: List[_Pending] = [(node.values[0], left.children), (node.values[1], left.children)]

        for value in node.values[2:]:
            left = SyntaxNode(
                type=BINARY_EXPRESSION,
                value=operator,
                attributes={"operator": operator},
                children=[left],
                **position,
            )
            operands.append((value, left.children))

        return left, operands

    def _position(self, node: python_ast.AST) -> dict:
        start_line = getattr(node, "lineno", 0)
        return {
            "start_line": start_line,
            "end_line": getattr(node, "end_lineno", start_line) or start_line,
            "start_column": getattr(node, "col_offset", 0),
            "end_column": getattr(node, "end_col_offset", 0) or 0,
        }

    def _get_node_type(self, node: python_ast.AST) -> str:
        """Map Python AST node types to normalized types."""
        class_name = node.__class__.__name__
        return TYPE_MAP.get(class_name, class_name.lower())

    def _get_node_value(self, node: python_ast.AST) -> Optional[str]:
        if isinstance(node, (python_ast.FunctionDef, python_ast.AsyncFunctionDef, python_ast.ClassDef)):
            return node.name
        return None

    def _get_attributes(self, node: python_ast.AST) -> dict:
        """Extract scoring attributes from the node."""
        if isinstance(node, python_ast.match_case):
            values = self._pattern_values(node.pattern)
            # a guard is one more condition on the arm
            if node.guard is not None:
                values += 1
            return {"values": values}
        return {}

    def _pattern_values(self, pattern: python_ast.pattern) -> int:
        """
        Count the alternatives a case pattern lists.

        ``case 1 | 2 | 3:`` lists three values. An irrefutable arm such as
        ``case _:`` or ``case other:`` is the default arm and lists none.
        """
        if isinstance(pattern, python_ast.MatchOr):
            return sum(self._pattern_values(p) or 1 for p in pattern.patterns)
        if isinstance(pattern, python_ast.MatchAs):
            if pattern.pattern is None:
                return 0
            return self._pattern_values(pattern.pattern)
        return 1

    def _function_identifier(self, node: python_ast.AST, file_path: str, lines: List[str]) -> Identifier:
        """Locate the name token of a def statement."""
        column = node.col_offset
        if 0 < node.lineno <= len(lines):
            match = re.search(r"\bdef\s+(%s)\b" % re.escape(node.name), lines[node.lineno - 1])
            if match:
                column = match.start(1)

        return Identifier(name=node.name, file_path=file_path, line=node.lineno, column=column)
