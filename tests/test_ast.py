"""
AST Test Suite
==============

Tests for AST node types, the visitor, and the printers.
"""

import pytest
from kscope.errors import SourceLocation
from kscope.frontend.ast import (
    ASTPrinter,
    ASTVisitor,
    BinaryExpression,
    CallExpression,
    EXPRESSION_KINDS,
    Function,
    NodeKind,
    NumberLiteral,
    Prototype,
    VariableReference,
    format_expression,
)
from kscope.frontend.parser import Parser, parse_expression


def parse_function(source: str) -> Function:
    """Parse a definition, or a bare expression as an anonymous function."""
    parser = Parser.from_source(source)
    parser.advance()
    if source.startswith("def"):
        return parser.parse_definition()
    return parser.parse_top_level_expr()


# =============================================================================
# Node Tests
# =============================================================================

class TestNodes:
    """Tests for node construction and equality."""

    def test_kind_tags(self):
        assert NumberLiteral(1.0).kind is NodeKind.NUMBER
        assert VariableReference("x").kind is NodeKind.VARIABLE
        assert BinaryExpression("+", NumberLiteral(1.0), NumberLiteral(2.0)).kind is NodeKind.BINARY
        assert CallExpression("f").kind is NodeKind.CALL
        assert Prototype("f").kind is NodeKind.PROTOTYPE
        assert Function(Prototype("f"), NumberLiteral(0.0)).kind is NodeKind.FUNCTION

    def test_expression_kinds(self):
        """Only the four expression variants are expression kinds."""
        assert NodeKind.PROTOTYPE not in EXPRESSION_KINDS
        assert NodeKind.FUNCTION not in EXPRESSION_KINDS
        assert len(EXPRESSION_KINDS) == 4

    def test_equality_ignores_location(self):
        """Trees from differently laid-out text compare equal."""
        first = parse_function("1+2*x")
        second = parse_function("  1 +\n 2 *   x")
        assert first == second
        assert first.body.location != second.body.location

    def test_nodes_are_frozen(self):
        node = VariableReference("x")
        with pytest.raises(AttributeError):
            node.name = "y"

    def test_nodes_are_hashable(self):
        """Frozen nodes with tuple children can be used as keys."""
        call = CallExpression("f", (NumberLiteral(1.0),))
        assert {call: 1}[CallExpression("f", (NumberLiteral(1.0),))] == 1

    def test_location_not_in_repr(self):
        node = VariableReference("x", location=SourceLocation("a.ks", 1, 1))
        assert repr(node) == "VariableReference(name='x')"

    def test_prototype_properties(self):
        proto = Prototype("f", ("a", "b"))
        assert proto.arity == 2
        assert not proto.is_anonymous
        assert Prototype("").is_anonymous

    def test_function_properties(self):
        function = parse_function("def f(x) x")
        assert function.name == "f"
        assert not function.is_anonymous
        assert parse_function("x").is_anonymous

    def test_children(self):
        left, right = VariableReference("a"), NumberLiteral(2.0)
        assert list(BinaryExpression("*", left, right).children()) == [left, right]
        assert list(CallExpression("f", (left, right)).children()) == [left, right]
        assert list(NumberLiteral(1.0).children()) == []

        proto = Prototype("g")
        assert list(Function(proto, left).children()) == [proto, left]


# =============================================================================
# Visitor Tests
# =============================================================================

class NameCollector(ASTVisitor):
    def __init__(self):
        self.names = []

    def visit_VariableReference(self, node):
        self.names.append(node.name)

    def visit_CallExpression(self, node):
        self.names.append(node.callee)
        self.generic_visit(node)


class NodeCounter(ASTVisitor):
    def __init__(self):
        self.counts = {}

    def visit(self, node):
        self.counts[node.kind] = self.counts.get(node.kind, 0) + 1
        return super().visit(node)


class TestVisitor:
    """Tests for tag-based visitor dispatch."""

    def test_dispatch_reaches_overrides(self):
        collector = NameCollector()
        collector.visit(parse_function("def f(x y) g(x, y + z) * w"))
        assert collector.names == ["g", "x", "y", "z", "w"]

    def test_generic_visit_walks_everything(self):
        counter = NodeCounter()
        counter.visit(parse_function("def f(x) f(x - 1) + 2"))
        assert counter.counts == {
            NodeKind.FUNCTION: 1,
            NodeKind.PROTOTYPE: 1,
            NodeKind.BINARY: 2,
            NodeKind.CALL: 1,
            NodeKind.VARIABLE: 1,
            NodeKind.NUMBER: 2,
        }

    def test_visit_returns_method_result(self):
        class Evaluator(ASTVisitor):
            def visit_NumberLiteral(self, node):
                return node.value

            def visit_BinaryExpression(self, node):
                left, right = self.visit(node.left), self.visit(node.right)
                return {"+": left + right, "-": left - right, "*": left * right}[node.operator]

        body = parse_function("1 + 2 * 3 - 4").body
        assert Evaluator().visit(body) == 3.0


# =============================================================================
# Printer Tests
# =============================================================================

class TestASTPrinter:
    """Tests for the indented tree printer."""

    def test_print_definition(self):
        output = ASTPrinter().print(parse_function("def f(x y) x + g(y, 1)"))
        assert output.splitlines() == [
            "Function: f(x, y)",
            "  Binary: +",
            "    Variable: x",
            "    Call: g",
            "      Variable: y",
            "      Number: 1",
        ]

    def test_print_anonymous_function(self):
        output = ASTPrinter().print(parse_function("2.5"))
        assert output == "Function: <anonymous>()\n  Number: 2.5"

    def test_print_prototype(self):
        assert ASTPrinter().print(Prototype("sin", ("x",))) == "Prototype: sin(x)"

    def test_printer_is_reusable(self):
        printer = ASTPrinter()
        printer.print(parse_function("def f(x) x"))
        assert printer.print(VariableReference("y")) == "Variable: y"

    @pytest.mark.parametrize("value,expected", [
        (1234567.0, "Number: 1234567"),
        (0.1, "Number: 0.1"),
        (1e20, "Number: 1e+20"),
    ])
    def test_numbers_keep_precision(self, value, expected):
        assert ASTPrinter().print(NumberLiteral(value)) == expected

    def test_long_operator_chain(self):
        """A flat chain builds a deep left-leaning tree; printing must not recurse."""
        body = parse_expression("1" + " + 1" * 3000)
        lines = ASTPrinter().print(body).splitlines()

        assert len(lines) == 3000 + 3001
        assert lines[0] == "Binary: +"
        assert lines[3000] == "  " * 3000 + "Number: 1"
        assert lines[-1] == "  Number: 1"


class TestFormatExpression:
    """Tests for the one-line expression renderer."""

    @pytest.mark.parametrize("source,expected", [
        ("42", "42"),
        ("x", "x"),
        ("1 + 2 * 3", "(1 + (2 * 3))"),
        ("(1 + 2) * 3", "((1 + 2) * 3)"),
        ("f()", "f()"),
        ("f(1, x < y)", "f(1, (x < y))"),
    ])
    def test_format(self, source, expected):
        assert format_expression(parse_function(source).body) == expected

    def test_rejects_non_expression(self):
        with pytest.raises(TypeError):
            format_expression(Prototype("f"))

    def test_large_numbers(self):
        assert format_expression(parse_expression("2.5 * 1234567")) == "(2.5 * 1234567)"

    def test_long_operator_chain(self):
        """Formatting a 3000-term sum does not hit the recursion limit."""
        text = format_expression(parse_expression("1" + " + 1" * 3000))
        assert text == "(" * 3000 + "1 + 1)" + " + 1)" * 2999

    def test_deeply_nested_calls(self):
        expr = NumberLiteral(0.0)
        for _ in range(3000):
            expr = CallExpression("f", (expr, VariableReference("x")))
        text = format_expression(expr)
        assert text.startswith("f(" * 3000 + "0, x)")
        assert text.endswith(", x)" * 2)
