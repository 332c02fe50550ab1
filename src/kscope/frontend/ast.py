"""
kscope Abstract Syntax Tree (AST) Definitions
=============================================

This module defines the node types produced by the parser.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions
│   ├── NumberLiteral - numeric constant
│   ├── VariableReference - reference to a named value
│   ├── BinaryExpression - binary operator applied to two operands
│   └── CallExpression - function call with ordered arguments
├── Prototype - function name and parameter names
└── Function - prototype plus body expression

Design Notes
------------
- The set of node types is closed. Every node carries a ``kind`` tag
  (NodeKind) so consumers can dispatch exhaustively on the tag instead of
  testing classes.
- Nodes are frozen dataclasses; children are built before their parent,
  so trees are acyclic and no child is shared.
- Sequences (call arguments, parameters) are tuples.
- ``location`` is excluded from equality, so two trees parsed from
  differently laid-out text compare equal when their structure matches.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, ClassVar, Iterator, Optional, Union

from kscope.errors import SourceLocation
from kscope.frontend.lexer import format_number


# =============================================================================
# Node Kinds
# =============================================================================

class NodeKind(Enum):
    """Variant tag carried by every AST node."""

    NUMBER = auto()
    VARIABLE = auto()
    BINARY = auto()
    CALL = auto()
    PROTOTYPE = auto()
    FUNCTION = auto()


EXPRESSION_KINDS = frozenset({
    NodeKind.NUMBER,
    NodeKind.VARIABLE,
    NodeKind.BINARY,
    NodeKind.CALL,
})

# Prototype name used for bare top-level expressions
ANONYMOUS_NAME = ""


class ASTNode:
    """
    Base class for all AST nodes.

    Subclasses set ``kind`` and list their child nodes through
    ``children()``.
    """

    kind: ClassVar[NodeKind]

    def children(self) -> Iterator["ASTNode"]:
        """Yield direct child nodes in source order."""
        return iter(())


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberLiteral(ASTNode):
    """
    Numeric literal such as ``1.0``.

    Attributes:
        value: The literal's value
    """
    kind: ClassVar[NodeKind] = NodeKind.NUMBER

    value: float
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class VariableReference(ASTNode):
    """
    Reference to a named value such as ``x``.

    Attributes:
        name: The referenced name
    """
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE

    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryExpression(ASTNode):
    """
    Binary operator expression such as ``x + y``.

    Attributes:
        operator: The operator character
        left: Left operand
        right: Right operand
    """
    kind: ClassVar[NodeKind] = NodeKind.BINARY

    operator: str
    left: "Expression"
    right: "Expression"
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def children(self) -> Iterator[ASTNode]:
        yield self.left
        yield self.right


@dataclass(frozen=True)
class CallExpression(ASTNode):
    """
    Function call such as ``f(1, x)``.

    Attributes:
        callee: Name of the called function
        arguments: Argument expressions in call order
    """
    kind: ClassVar[NodeKind] = NodeKind.CALL

    callee: str
    arguments: tuple["Expression", ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def children(self) -> Iterator[ASTNode]:
        yield from self.arguments


Expression = Union[NumberLiteral, VariableReference, BinaryExpression, CallExpression]


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass(frozen=True)
class Prototype(ASTNode):
    """
    Function signature: a name and its parameter names.

    An extern declaration is a bare Prototype. The empty name marks the
    synthetic wrapper of a top-level expression. Repeated parameter
    names are allowed.

    Attributes:
        name: Function name, or ANONYMOUS_NAME
        params: Parameter names in declaration order
    """
    kind: ClassVar[NodeKind] = NodeKind.PROTOTYPE

    name: str
    params: tuple[str, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    @property
    def arity(self) -> int:
        """Number of parameters."""
        return len(self.params)

    @property
    def is_anonymous(self) -> bool:
        """True for the wrapper of a top-level expression."""
        return self.name == ANONYMOUS_NAME


@dataclass(frozen=True)
class Function(ASTNode):
    """
    Function definition, or an anonymous top-level expression.

    Attributes:
        prototype: The function's signature
        body: The expression computing the result
    """
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION

    prototype: Prototype
    body: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.prototype.name

    @property
    def is_anonymous(self) -> bool:
        return self.prototype.is_anonymous

    def children(self) -> Iterator[ASTNode]:
        yield self.prototype
        yield self.body


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatch uses the node's ``kind`` tag. Subclasses override the
    visit_* methods for the node types they care about; the rest fall
    through to generic_visit, which visits the children.

    Usage:
        class NameCollector(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_VariableReference(self, node):
                self.names.append(node.name)

        collector = NameCollector()
        collector.visit(function)
    """

    _DISPATCH: ClassVar[dict[NodeKind, str]] = {
        NodeKind.NUMBER: "visit_NumberLiteral",
        NodeKind.VARIABLE: "visit_VariableReference",
        NodeKind.BINARY: "visit_BinaryExpression",
        NodeKind.CALL: "visit_CallExpression",
        NodeKind.PROTOTYPE: "visit_Prototype",
        NodeKind.FUNCTION: "visit_Function",
    }

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a node by dispatching on its kind.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by node type)
        """
        return getattr(self, self._DISPATCH[node.kind])(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all children of the node."""
        for child in node.children():
            self.visit(child)

    def visit_NumberLiteral(self, node: NumberLiteral): return self.generic_visit(node)
    def visit_VariableReference(self, node: VariableReference): return self.generic_visit(node)
    def visit_BinaryExpression(self, node: BinaryExpression): return self.generic_visit(node)
    def visit_CallExpression(self, node: CallExpression): return self.generic_visit(node)
    def visit_Prototype(self, node: Prototype): return self.generic_visit(node)
    def visit_Function(self, node: Function): return self.generic_visit(node)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces an indented, one-node-per-line rendering:

        Function: f(x)
          Binary: +
            Variable: x
            Number: 1

    Each visit_* method returns the node's label and the children to print
    beneath it. print() walks the tree with an explicit stack, so long
    operator chains such as ``1 + 1 + ... + 1`` never hit the interpreter
    recursion limit.

    Usage:
        printer = ASTPrinter()
        output = printer.print(ast)
        print(output)
    """

    INDENT = "  "

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        lines = []
        stack: list[tuple[ASTNode, int]] = [(node, 0)]
        while stack:
            current, depth = stack.pop()
            label, children = self.visit(current)
            lines.append(f"{self.INDENT * depth}{label}")
            stack.extend((child, depth + 1) for child in reversed(children))
        return "\n".join(lines)

    def visit_NumberLiteral(self, node: NumberLiteral):
        return f"Number: {format_number(node.value)}", ()

    def visit_VariableReference(self, node: VariableReference):
        return f"Variable: {node.name}", ()

    def visit_BinaryExpression(self, node: BinaryExpression):
        return f"Binary: {node.operator}", (node.left, node.right)

    def visit_CallExpression(self, node: CallExpression):
        return f"Call: {node.callee}", node.arguments

    def visit_Prototype(self, node: Prototype):
        return f"Prototype: {self._signature(node)}", ()

    def visit_Function(self, node: Function):
        return f"Function: {self._signature(node.prototype)}", (node.body,)

    def _signature(self, proto: Prototype) -> str:
        name = "<anonymous>" if proto.is_anonymous else proto.name
        return f"{name}({', '.join(proto.params)})"


def format_expression(expr: Expression) -> str:
    """
    Render an expression on one line, fully parenthesized.

    >>> format_expression(BinaryExpression("+", NumberLiteral(1.0), VariableReference("x")))
    '(1 + x)'

    Operands are rendered before their parent using an explicit stack
    rather than recursion, so tree depth is not limited.
    """
    rendered: list[str] = []
    # (node, operands_done): parents are revisited once their operands are rendered
    stack: list[tuple[ASTNode, bool]] = [(expr, False)]

    while stack:
        node, operands_done = stack.pop()

        if node.kind is NodeKind.NUMBER:
            rendered.append(format_number(node.value))
        elif node.kind is NodeKind.VARIABLE:
            rendered.append(node.name)
        elif node.kind is NodeKind.BINARY:
            if operands_done:
                right = rendered.pop()
                left = rendered.pop()
                rendered.append(f"({left} {node.operator} {right})")
            else:
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
        elif node.kind is NodeKind.CALL:
            if operands_done:
                start = len(rendered) - len(node.arguments)
                args = ", ".join(rendered[start:])
                del rendered[start:]
                rendered.append(f"{node.callee}({args})")
            else:
                stack.append((node, True))
                stack.extend((arg, False) for arg in reversed(node.arguments))
        else:
            raise TypeError(f"not an expression: {type(node).__name__}")

    return rendered[0]
