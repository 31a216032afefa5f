"""
McCabe cyclomatic complexity of function definitions.

Scores are accumulated while the syntax tree is walked: entering a
function definition opens a frame worth 1, every decision point entered
inside it adds to that frame, and leaving the function closes the frame
and reports the final score.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cyclomatic.core.facts import FactStore
from cyclomatic.core.findings import Diagnostic, Identifier
from cyclomatic.core.inspector import Inspector
from cyclomatic.logging_config import get_logger
from cyclomatic.parsers.base import (
    SyntaxNode, SyntaxUnit,
    BINARY_EXPRESSION, CASE_CLAUSE, COMM_CLAUSE, FOR_LOOP, FUNCTION_DEFINITION,
    IF_EXPRESSION, IF_STATEMENT, WHILE_LOOP,
)

logger = get_logger(__name__)

DEFAULT_LIMIT = 10

BRANCH_TYPES = {IF_STATEMENT, IF_EXPRESSION, FOR_LOOP, WHILE_LOOP, COMM_CLAUSE}
LOGICAL_OPERATORS = {"&&", "||", "and", "or"}

# Node types the pass asks the inspector for
NODE_TYPES = [
    FUNCTION_DEFINITION,
    IF_STATEMENT,
    IF_EXPRESSION,
    FOR_LOOP,
    WHILE_LOOP,
    COMM_CLAUSE,
    CASE_CLAUSE,
    BINARY_EXPRESSION,
]


def score_delta(node: SyntaxNode) -> int:
    """
    Return how much a node adds to the enclosing function's complexity.

    Function definitions add nothing here: they open a new frame instead.
    """
    if node.type in BRANCH_TYPES:
        return 1
    if node.type == CASE_CLAUSE:
        return node.attributes.get("values", 0)
    if node.type == BINARY_EXPRESSION:
        return 1 if node.attributes.get("operator") in LOGICAL_OPERATORS else 0
    return 0


class Accumulator:
    """
    Running complexity totals, one frame per open function definition.

    A function nested inside another gets its own frame, so its decision
    points never leak into the enclosing function's score.
    """

    def __init__(self):
        self._frames: List[int] = []

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def current(self) -> int:
        if not self._frames:
            raise RuntimeError("no function is being scored")
        return self._frames[-1]

    def push(self) -> None:
        self._frames.append(1)

    def add(self, delta: int) -> None:
        # decision points outside any function are not scored
        if self._frames:
            self._frames[-1] += delta

    def pop(self) -> int:
        if not self._frames:
            raise RuntimeError("no function is being scored")
        return self._frames.pop()


class Reporter:
    """
    Publishes the final score of each function.

    Every function gets a result entry and an exported fact; only those over
    the limit also get a diagnostic.
    """

    def __init__(self, unit: SyntaxUnit, facts: FactStore, limit: int = DEFAULT_LIMIT):
        self.unit = unit
        self.facts = facts
        self.limit = limit
        self.results: Dict[Identifier, int] = {}
        self.diagnostics: List[Diagnostic] = []

    def report(self, node: SyntaxNode, score: int) -> Optional[Diagnostic]:
        identifier = node.identifier
        if identifier is None:
            raise ValueError(f"function definition without a name token: {node!r}")

        self.results[identifier] = score

        # raises ResolutionError, which aborts the unit
        identity = self.unit.resolver.resolve(identifier)

        self.facts.export(identity, score)

        if score <= self.limit:
            return None

        diagnostic = Diagnostic(
            message=f"cyclomatic complexity of {identity.name} exceeded limit {score} > {self.limit}",
            location=node.location(self.unit.file_path),
            function=identity.name,
            complexity=score,
            limit=self.limit,
            identity=identity,
        )
        self.diagnostics.append(diagnostic)
        logger.debug("%s: %s", diagnostic.location, diagnostic.message)
        return diagnostic


@dataclass
class PassResult:
    """What one run of the pass hands back to the engine."""
    complexities: Dict[Identifier, int] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)


class ComplexityPass:
    """
    Scores every function definition of one syntax unit.

    Instances hold per-unit state; create one per unit.
    """

    def __init__(self, unit: SyntaxUnit, facts: FactStore, limit: int = DEFAULT_LIMIT):
        self.unit = unit
        self.accumulator = Accumulator()
        self.reporter = Reporter(unit, facts, limit)

    def on_enter(self, node: SyntaxNode) -> None:
        if node.type == FUNCTION_DEFINITION:
            self.accumulator.push()
        else:
            self.accumulator.add(score_delta(node))

    def on_exit(self, node: SyntaxNode) -> None:
        if node.type == FUNCTION_DEFINITION:
            self.reporter.report(node, self.accumulator.pop())

    def run(self) -> PassResult:
        Inspector(self.unit.root).walk(self, NODE_TYPES)
        logger.debug(
            "%s: scored %d functions", self.unit.file_path, len(self.reporter.results)
        )
        return PassResult(
            complexities=dict(self.reporter.results),
            diagnostics=list(self.reporter.diagnostics),
        )


def analyze(unit: SyntaxUnit, facts: FactStore, limit: int = DEFAULT_LIMIT) -> PassResult:
    """Run the complexity pass over one syntax unit."""
    return ComplexityPass(unit, facts, limit).run()
