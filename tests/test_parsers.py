"""
Tests for the language front ends.
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cyclomatic.core.complexity import analyze
from cyclomatic.core.errors import ParsingError, ResolutionError, UnsupportedLanguageError
from cyclomatic.core.facts import MemoryFactStore
from cyclomatic.core.findings import Identifier
from cyclomatic.parsers import get_parser, list_supported_languages
from cyclomatic.parsers.base import BINARY_EXPRESSION, CASE_CLAUSE, COMM_CLAUSE, FUNCTION_DEFINITION
from cyclomatic.parsers.python_parser import module_name_for


def scores(language, source, file_path):
    """Parse and analyze source, returning {function name: score}."""
    unit = get_parser(language).parse(source, file_path)
    result = analyze(unit, MemoryFactStore())
    return {identifier.name: score for identifier, score in result.complexities.items()}


class TestRegistry:
    """Tests for parser lookup."""

    def test_supported_languages(self):
        """Both front ends are registered."""
        assert list_supported_languages() == ["go", "python"]

    def test_aliases(self):
        """Common aliases map to the registered front ends."""
        assert get_parser("py").language == "python"
        assert get_parser("Python3").language == "python"
        assert get_parser("golang").language == "go"

    def test_unknown_language(self):
        """Asking for an unknown language is an error."""
        with pytest.raises(UnsupportedLanguageError) as excinfo:
            get_parser("cobol")
        assert "go, python" in str(excinfo.value)


class TestPythonParser:
    """Tests for the Python front end."""

    def test_empty_function(self):
        """A function with only a docstring scores one."""
        assert scores("python", 'def f():\n    """Nothing."""\n', "m.py") == {"f": 1}

    def test_branches_and_loops(self):
        """if, elif, for, async for, while and conditional expressions count."""
        source = '''
async def f(xs, ys):
    if xs:
        pass
    elif ys:
        pass
    for x in xs:
        pass
    async for y in ys:
        pass
    while False:
        pass
    return 1 if xs else 2
'''
        assert scores("python", source, "m.py") == {"f": 7}

    def test_comprehensions_and_try_do_not_count(self):
        """Only the constructs in the scoring table are decision points."""
        source = '''
def f(xs):
    try:
        return [x for x in xs if x]
    except ValueError:
        return []
    finally:
        pass
'''
        assert scores("python", source, "m.py") == {"f": 1}

    def test_boolean_chain_expands_per_operator(self):
        """``a and b or c`` counts two operators, ``a and b and c`` also two."""
        source = '''
def f(a, b, c):
    return a and b or c

def g(a, b, c):
    return a and b and c
'''
        assert scores("python", source, "m.py") == {"f": 3, "g": 3}

    def test_bool_op_nodes(self):
        """Each operator occurrence becomes its own binary node."""
        unit = get_parser("python").parse("x = a or b or c or d\n", "m.py")
        operators = [n.attributes["operator"] for n in unit.root.find_all(BINARY_EXPRESSION)]
        assert operators == ["or", "or", "or"]

    def test_match_values(self):
        """Alternatives count individually; the wildcard arm counts zero."""
        source = '''
def f(x):
    match x:
        case 1 | 2 | 3:
            return "small"
        case _:
            return "other"
'''
        unit = get_parser("python").parse(source, "m.py")
        values = [n.attributes["values"] for n in unit.root.find_all(CASE_CLAUSE)]
        assert values == [3, 0]
        assert scores("python", source, "m.py") == {"f": 4}

    def test_match_capture_and_class_patterns(self):
        """A bare capture is a default arm; class and guard-free value patterns count one."""
        source = '''
def f(p):
    match p:
        case Point(x=0):
            pass
        case [1, 2] as pair:
            pass
        case other:
            pass
'''
        assert scores("python", source, "m.py") == {"f": 3}

    def test_nested_function_scored_separately(self):
        """Inner functions have their own score."""
        source = '''
def outer(x):
    def inner(y):
        if y:
            return 1
        return 0
    for i in x:
        inner(i)
'''
        assert scores("python", source, "m.py") == {"outer": 2, "inner": 2}

    def test_lambda_folds_into_enclosing(self):
        """A lambda's decisions belong to the function around it."""
        source = '''
def f(xs):
    return sorted(xs, key=lambda x: x or 0)
'''
        assert scores("python", source, "m.py") == {"f": 2}

    def test_identifier_points_at_name(self):
        """The name token is located on the def line."""
        unit = get_parser("python").parse("class A:\n    async def run(self):\n        pass\n", "m.py")
        (definition,) = unit.function_definitions()
        assert definition.identifier == Identifier(name="run", file_path="m.py", line=2, column=14)

    def test_qualified_names(self):
        """Methods and nested functions resolve to their qualified names."""
        source = '''
class Outer:
    def method(self):
        def helper():
            pass

def top():
    pass
'''
        unit = get_parser("python").parse(source, "pkg_mod.py")
        facts = MemoryFactStore()
        analyze(unit, facts)
        assert dict(facts.items()) == {
            "python:pkg_mod.Outer.method": 1,
            "python:pkg_mod.Outer.method.<locals>.helper": 1,
            "python:pkg_mod.top": 1,
        }

    def test_resolver_rejects_unknown_identifier(self):
        """A name token that matches no function table cannot be resolved."""
        unit = get_parser("python").parse("class A:\n    pass\n", "m.py")
        with pytest.raises(ResolutionError):
            unit.resolver.resolve(Identifier(name="A", file_path="m.py", line=1))
        with pytest.raises(ResolutionError):
            unit.resolver.resolve(Identifier(name="missing", file_path="m.py", line=9))

    def test_syntax_error(self):
        """Invalid source raises ParsingError."""
        with pytest.raises(ParsingError) as excinfo:
            get_parser("python").parse("def broken(:\n", "bad.py")
        assert excinfo.value.file_path == "bad.py"

    def test_redefinition_gets_own_fact(self):
        """A function defined twice in one scope exports two facts."""
        source = '''
import sys

if sys.version_info >= (3, 11):
    def f():
        return 1
else:
    def f():
        if sys.platform:
            return 2
'''
        facts = MemoryFactStore()
        result = analyze(get_parser("python").parse(source, "m.py"), facts)

        assert len(result.complexities) == len(facts) == 2
        assert dict(facts.items()) == {"python:m.f": 1, "python:m.f#2": 2}

    def test_match_guard_counts(self):
        """A guard is a decision point, even on a capture arm."""
        source = '''
def f(x):
    match x:
        case y if y > 0:
            return y
        case 1 | 2 if x:
            return 1
        case _:
            return 0
'''
        unit = get_parser("python").parse(source, "m.py")
        values = [n.attributes["values"] for n in unit.root.find_all(CASE_CLAUSE)]
        assert values == [1, 3, 0]
        assert scores("python", source, "m.py") == {"f": 5}

    def test_long_operator_chain(self):
        """Deeply nested expressions are converted without recursion."""
        source = "def f(x):\n    return " + " + ".join(["x"] * 1500) + "\n"
        assert scores("python", source, "chain.py") == {"f": 1}

    def test_module_name_for_package(self, tmp_path):
        """Files inside packages get a dotted module name."""
        package = tmp_path / "app" / "sub"
        package.mkdir(parents=True)
        (tmp_path / "app" / "__init__.py").write_text("")
        (package / "__init__.py").write_text("")
        (package / "mod.py").write_text("")

        assert module_name_for(str(package / "mod.py")) == "app.sub.mod"
        assert module_name_for(str(package / "__init__.py")) == "app.sub"
        assert module_name_for(str(tmp_path / "script.py")) == "script"


GO_SOURCE = '''package shapes

func Plain() {}

type T struct{}

func (t T) Value(x int) int {
	if x > 0 && x < 10 || x == 42 {
		return 1
	}
	return 0
}

func (t *T) Pointer(ch chan int) {
	select {
	case v := <-ch:
		_ = v
	default:
	}
}

func Switch(x int) int {
	switch x {
	case 1, 2, 3:
		return 1
	default:
		return 0
	}
}

func Types(v interface{}) int {
	switch v.(type) {
	case int, string:
		return 1
	case error:
		return 2
	}
	for i := 0; i < 3; i++ {
	}
	return 0
}

func Closure(xs []int) func() bool {
	return func() bool {
		for range xs {
			if len(xs) > 2 {
				return true
			}
		}
		return false
	}
}
'''


class TestGoParser:
    """Tests for the Go front end."""

    def test_scores(self):
        """Every construct of the scoring table is recognized."""
        assert scores("go", GO_SOURCE, "shapes.go") == {
            "Plain": 1,
            "Value": 4,
            "Pointer": 3,
            "Switch": 4,
            "Types": 5,
            "Closure": 3,
        }

    def test_default_arms(self):
        """select's default is a comm clause; switch's default lists nothing."""
        unit = get_parser("go").parse(GO_SOURCE, "shapes.go")
        assert len(list(unit.root.find_all(COMM_CLAUSE))) == 2
        values = [n.attributes["values"] for n in unit.root.find_all(CASE_CLAUSE)]
        assert values == [3, 0, 2, 1]

    def test_operators(self):
        """Binary nodes keep their operator."""
        unit = get_parser("go").parse(GO_SOURCE, "shapes.go")
        operators = {n.attributes["operator"] for n in unit.root.find_all(BINARY_EXPRESSION)}
        assert {"&&", "||", ">", "<", "=="} <= operators

    def test_identities(self):
        """Functions and methods resolve to package-qualified identities."""
        facts = MemoryFactStore()
        analyze(get_parser("go").parse(GO_SOURCE, "shapes.go"), facts)
        assert facts.lookup("go:shapes.Plain") == 1
        assert facts.lookup("go:shapes.T.Value") == 4
        assert facts.lookup("go:shapes.(*T).Pointer") == 3

    def test_identifier_points_at_name(self):
        """The name token, not the func keyword, anchors the definition."""
        unit = get_parser("go").parse(GO_SOURCE, "shapes.go")
        definitions = {n.identifier.name: n.identifier for n in unit.root.find_all(FUNCTION_DEFINITION)}
        assert definitions["Plain"] == Identifier(name="Plain", file_path="shapes.go", line=3, column=5)

    def test_missing_package_clause(self):
        """Without a package clause no function resolves."""
        unit = get_parser("go").parse("func F() {}\n", "loose.go")
        with pytest.raises(ResolutionError):
            analyze(unit, MemoryFactStore())

    def test_syntax_error(self):
        """Source with syntax errors raises ParsingError."""
        with pytest.raises(ParsingError) as excinfo:
            get_parser("go").parse("package p\n\nfunc {\n", "bad.go")
        assert "syntax error" in str(excinfo.value)

    def test_repeated_init_functions(self):
        """Each init and blank function gets its own fact."""
        source = '''package p

var a bool

func init() {
	if a {
	}
}

func init() {}

func _() {}

func _() {}
'''
        facts = MemoryFactStore()
        result = analyze(get_parser("go").parse(source, "p.go"), facts)

        assert len(result.complexities) == len(facts) == 4
        assert dict(facts.items()) == {
            "go:p.init": 2,
            "go:p.init#2": 1,
            "go:p._": 1,
            "go:p._#2": 1,
        }

    def test_long_operator_chain(self):
        """Deeply nested expressions are converted without recursion."""
        chain = " || ".join(f"x == {i}" for i in range(1500))
        source = f"package p\n\nfunc F(x int) bool {{\n\treturn {chain}\n}}\n"
        assert scores("go", source, "chain.go") == {"F": 1500}
