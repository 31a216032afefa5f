"""
Go front end using tree-sitter.

The concrete tree-sitter tree is folded into the normalized SyntaxNode
vocabulary: select arms become comm_clause nodes, switch arms become
case_clause nodes that remember how many values they list.
"""

from typing import Dict, List, Optional, Tuple

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from cyclomatic.core.errors import ParsingError, ResolutionError
from cyclomatic.core.findings import FunctionIdentity, Identifier
from cyclomatic.parsers import register_parser
from cyclomatic.parsers.base import (
    BaseParser, Resolver, SyntaxNode, SyntaxUnit, unique_name,
    BINARY_EXPRESSION, CASE_CLAUSE, COMM_CLAUSE, FOR_LOOP,
    FUNCTION_DEFINITION, FUNCTION_LITERAL, IF_STATEMENT,
)


GO_LANGUAGE = Language(tree_sitter_go.language())

TYPE_MAP = {
    "source_file": "module",
    "function_declaration": FUNCTION_DEFINITION,
    "method_declaration": FUNCTION_DEFINITION,
    "func_literal": FUNCTION_LITERAL,
    "if_statement": IF_STATEMENT,
    "for_statement": FOR_LOOP,
    "communication_case": COMM_CLAUSE,
    "expression_case": CASE_CLAUSE,
    "type_case": CASE_CLAUSE,
    "binary_expression": BINARY_EXPRESSION,
}


class GoResolver(Resolver):
    """
    Resolves function name tokens to package-qualified identities.

    Identities follow the go/types spelling: ``pkg.Func``, ``pkg.T.Method``
    and ``pkg.(*T).Method``. Repeated names such as a second ``init`` get a
    ``#N`` suffix in declaration order.
    """

    def __init__(self, package: Optional[str], declarations: Dict[Identifier, str]):
        self.package = package
        self.declarations = declarations

    def resolve(self, identifier: Identifier) -> FunctionIdentity:
        if self.package is None:
            raise ResolutionError(identifier, "file has no package clause")

        qualname = self.declarations.get(identifier)
        if qualname is None:
            raise ResolutionError(identifier, "not declared as a function or method")

        return FunctionIdentity(language="go", package=self.package, qualname=qualname)


@register_parser("go")
class GoParser(BaseParser):
    """
    Parser for Go source code using the tree-sitter Go grammar.
    """

    @property
    def language(self) -> str:
        return "go"

    def parse(self, source: str, file_path: str = "<unknown>") -> SyntaxUnit:
        """Parse Go source code into a normalized syntax unit."""
        parser = Parser(GO_LANGUAGE)
        tree = parser.parse(source.encode("utf-8"))

        if tree.root_node.has_error:
            raise ParsingError(file_path, self.language, self._describe_error(tree.root_node))

        declarations: Dict[Identifier, str] = {}
        root = self._convert_tree(tree.root_node, file_path, declarations)

        return SyntaxUnit(
            file_path=file_path,
            language=self.language,
            source=source,
            root=root,
            resolver=GoResolver(self._package_name(tree.root_node), declarations),
        )

    def _convert_tree(self, root: Node, file_path: str, declarations: Dict[Identifier, str]) -> SyntaxNode:
        """
        Convert a tree-sitter tree to our normalized SyntaxNode tree.

        Uses an explicit stack; long operator chains nest thousands of
        levels deep.
        """
        converted: List[SyntaxNode] = []
        seen: Dict[str, int] = {}
        stack: List[Tuple[Node, Optional[Node], List[SyntaxNode]]] = [(root, None, converted)]

        while stack:
            node, parent, siblings = stack.pop()
            syntax_node = SyntaxNode(
                type=self._get_node_type(node, parent),
                value=self._get_node_value(node),
                start_line=node.start_point[0] + 1,
                end_line=node.end_point[0] + 1,
                start_column=node.start_point[1],
                end_column=node.end_point[1],
                attributes=self._get_attributes(node, parent),
            )

            if node.type in ("function_declaration", "method_declaration"):
                name_node = node.child_by_field_name("name")
                identifier = Identifier(
                    name=_text(name_node),
                    file_path=file_path,
                    line=name_node.start_point[0] + 1,
                    column=name_node.start_point[1],
                )
                syntax_node.identifier = identifier
                # several init and _ functions may share a package
                declarations[identifier] = unique_name(self._qualified_name(node, identifier.name), seen)

            siblings.append(syntax_node)
            stack.extend((child, node, syntax_node.children) for child in reversed(node.named_children))

        return converted[0]

    def _get_node_type(self, node: Node, parent: Optional[Node]) -> str:
        if node.type == "default_case":
            # select's default arm is a communication clause; switch's is a case clause
            if parent is not None and parent.type == "select_statement":
                return COMM_CLAUSE
            return CASE_CLAUSE
        return TYPE_MAP.get(node.type, node.type)

    def _get_node_value(self, node: Node) -> Optional[str]:
        if node.type in ("identifier", "field_identifier", "type_identifier", "package_identifier"):
            return _text(node)
        if node.type in ("function_declaration", "method_declaration"):
            return _text(node.child_by_field_name("name"))
        return None

    def _get_attributes(self, node: Node, parent: Optional[Node]) -> dict:
        if node.type == "expression_case":
            values = node.child_by_field_name("value")
            return {"values": values.named_child_count if values is not None else 0}
        if node.type == "type_case":
            return {"values": len(node.children_by_field_name("type"))}
        if node.type == "default_case" and not (parent is not None and parent.type == "select_statement"):
            return {"values": 0}
        if node.type == "binary_expression":
            operator = node.child_by_field_name("operator")
            return {"operator": operator.type if operator is not None else ""}
        return {}

    def _qualified_name(self, node: Node, name: str) -> str:
        """Build the package-relative name of a function or method."""
        if node.type != "method_declaration":
            return name

        receiver = node.child_by_field_name("receiver")
        params = [c for c in receiver.named_children if c.type == "parameter_declaration"] if receiver else []
        if not params:
            return name

        type_node = params[0].child_by_field_name("type")
        pointer = False
        if type_node is not None and type_node.type == "pointer_type":
            pointer = True
            type_node = type_node.named_children[0] if type_node.named_children else None
        if type_node is not None and type_node.type == "generic_type":
            type_node = type_node.child_by_field_name("type")
        if type_node is None:
            return name

        receiver_name = _text(type_node)
        if pointer:
            return f"(*{receiver_name}).{name}"
        return f"{receiver_name}.{name}"

    def _package_name(self, root: Node) -> Optional[str]:
        for child in root.named_children:
            if child.type == "package_clause":
                for part in child.named_children:
                    if part.type == "package_identifier":
                        return _text(part)
        return None

    def _describe_error(self, root: Node) -> str:
        stack: List[Node] = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                line, column = node.start_point[0] + 1, node.start_point[1] + 1
                return f"syntax error at line {line}, column {column}"
            stack.extend(reversed(node.children))
        return "syntax error"


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")
