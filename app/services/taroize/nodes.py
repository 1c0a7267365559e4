"""
AST node definitions for the taroize compiler.

Script, template and output trees all share these node classes. Each node
kind is its own dataclass, so visitors dispatch on the class name rather
than probing a ``type`` key the way an ESTree dictionary would.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Any, List, Optional, Union


class Node:
    """Base class for every AST node."""

    # (line, column) of the first token, filled in by the parser
    loc = None

    @property
    def type(self) -> str:
        return type(self).__name__


# ============ Literals & identifiers ============

@dataclass
class Identifier(Node):
    name: str


@dataclass
class StringLiteral(Node):
    value: str


@dataclass
class NumericLiteral(Node):
    value: Union[int, float]
    raw: Optional[str] = None


@dataclass
class BooleanLiteral(Node):
    value: bool


@dataclass
class NullLiteral(Node):
    pass


@dataclass
class RegExpLiteral(Node):
    pattern: str
    flags: str = ""


@dataclass
class TemplateLiteral(Node):
    quasis: List[str]
    expressions: List[Node] = field(default_factory=list)


@dataclass
class TaggedTemplateExpression(Node):
    tag: Node
    quasi: TemplateLiteral


@dataclass
class ThisExpression(Node):
    pass


@dataclass
class Super(Node):
    pass


# ============ Compound expressions ============

@dataclass
class ArrayExpression(Node):
    elements: List[Optional[Node]] = field(default_factory=list)


@dataclass
class ObjectExpression(Node):
    properties: List[Node] = field(default_factory=list)


@dataclass
class ObjectProperty(Node):
    key: Node
    value: Node
    computed: bool = False
    shorthand: bool = False


@dataclass
class ObjectMethod(Node):
    kind: str  # "method" | "get" | "set"
    key: Node
    params: List[Node]
    body: "BlockStatement"
    computed: bool = False
    is_async: bool = False
    generator: bool = False


@dataclass
class SpreadElement(Node):
    argument: Node


@dataclass
class FunctionExpression(Node):
    id: Optional[Identifier]
    params: List[Node]
    body: "BlockStatement"
    is_async: bool = False
    generator: bool = False


@dataclass
class ArrowFunctionExpression(Node):
    params: List[Node]
    body: Node  # BlockStatement or a concise expression body
    is_async: bool = False


@dataclass
class ClassExpression(Node):
    id: Optional[Identifier]
    superclass: Optional[Node]
    body: List[Node] = field(default_factory=list)
    decorators: List["Decorator"] = field(default_factory=list)


@dataclass
class UnaryExpression(Node):
    operator: str
    argument: Node


@dataclass
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool = True


@dataclass
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class LogicalExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class AssignmentExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass
class CallExpression(Node):
    callee: Node
    arguments: List[Node] = field(default_factory=list)
    optional: bool = False


@dataclass
class NewExpression(Node):
    callee: Node
    arguments: List[Node] = field(default_factory=list)


@dataclass
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False


@dataclass
class SequenceExpression(Node):
    expressions: List[Node]


@dataclass
class AwaitExpression(Node):
    argument: Node


@dataclass
class YieldExpression(Node):
    argument: Optional[Node] = None
    delegate: bool = False


# ============ Patterns ============

@dataclass
class ObjectPattern(Node):
    properties: List[Node] = field(default_factory=list)


@dataclass
class ArrayPattern(Node):
    elements: List[Optional[Node]] = field(default_factory=list)


@dataclass
class AssignmentPattern(Node):
    left: Node
    right: Node


@dataclass
class RestElement(Node):
    argument: Node


# ============ Statements ============

@dataclass
class Program(Node):
    body: List[Node] = field(default_factory=list)


@dataclass
class ExpressionStatement(Node):
    expression: Node


@dataclass
class BlockStatement(Node):
    body: List[Node] = field(default_factory=list)


@dataclass
class EmptyStatement(Node):
    pass


@dataclass
class DebuggerStatement(Node):
    pass


@dataclass
class VariableDeclarator(Node):
    id: Node
    init: Optional[Node] = None


@dataclass
class VariableDeclaration(Node):
    kind: str
    declarations: List[VariableDeclarator]


@dataclass
class FunctionDeclaration(Node):
    id: Optional[Identifier]
    params: List[Node]
    body: BlockStatement
    is_async: bool = False
    generator: bool = False


@dataclass
class Decorator(Node):
    expression: Node


@dataclass
class ClassMethod(Node):
    kind: str  # "constructor" | "method" | "get" | "set"
    key: Node
    params: List[Node]
    body: BlockStatement
    computed: bool = False
    static: bool = False
    is_async: bool = False
    generator: bool = False
    decorators: List[Decorator] = field(default_factory=list)


@dataclass
class ClassProperty(Node):
    key: Node
    value: Optional[Node] = None
    computed: bool = False
    static: bool = False
    decorators: List[Decorator] = field(default_factory=list)


@dataclass
class ClassDeclaration(Node):
    id: Optional[Identifier]
    superclass: Optional[Node]
    body: List[Node] = field(default_factory=list)
    decorators: List[Decorator] = field(default_factory=list)


@dataclass
class ReturnStatement(Node):
    argument: Optional[Node] = None


@dataclass
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Optional[Node] = None


@dataclass
class ForStatement(Node):
    init: Optional[Node]
    test: Optional[Node]
    update: Optional[Node]
    body: Node


@dataclass
class ForInStatement(Node):
    left: Node
    right: Node
    body: Node


@dataclass
class ForOfStatement(Node):
    left: Node
    right: Node
    body: Node
    is_await: bool = False


@dataclass
class WhileStatement(Node):
    test: Node
    body: Node


@dataclass
class DoWhileStatement(Node):
    body: Node
    test: Node


@dataclass
class BreakStatement(Node):
    label: Optional[Identifier] = None


@dataclass
class ContinueStatement(Node):
    label: Optional[Identifier] = None


@dataclass
class ThrowStatement(Node):
    argument: Node


@dataclass
class CatchClause(Node):
    param: Optional[Node]
    body: BlockStatement


@dataclass
class TryStatement(Node):
    block: BlockStatement
    handler: Optional[CatchClause] = None
    finalizer: Optional[BlockStatement] = None


@dataclass
class SwitchCase(Node):
    test: Optional[Node]
    consequent: List[Node] = field(default_factory=list)


@dataclass
class SwitchStatement(Node):
    discriminant: Node
    cases: List[SwitchCase] = field(default_factory=list)


@dataclass
class LabeledStatement(Node):
    label: Identifier
    body: Node


# ============ Modules ============

@dataclass
class ImportSpecifier(Node):
    imported: Identifier
    local: Identifier


@dataclass
class ImportDefaultSpecifier(Node):
    local: Identifier


@dataclass
class ImportNamespaceSpecifier(Node):
    local: Identifier


@dataclass
class ImportDeclaration(Node):
    specifiers: List[Node]
    source: StringLiteral


@dataclass
class ExportSpecifier(Node):
    local: Identifier
    exported: Identifier


@dataclass
class ExportNamedDeclaration(Node):
    declaration: Optional[Node] = None
    specifiers: List[ExportSpecifier] = field(default_factory=list)
    source: Optional[StringLiteral] = None


@dataclass
class ExportDefaultDeclaration(Node):
    declaration: Node


@dataclass
class ExportAllDeclaration(Node):
    source: StringLiteral


# ============ JSX ============

@dataclass
class JSXText(Node):
    value: str


@dataclass
class JSXExpressionContainer(Node):
    expression: Node


@dataclass
class JSXAttribute(Node):
    name: str
    value: Optional[Node] = None  # StringLiteral | JSXExpressionContainer | None


@dataclass
class JSXElement(Node):
    name: str
    attributes: List[JSXAttribute] = field(default_factory=list)
    children: List[Node] = field(default_factory=list)


def copy_node(node: Node, **changes: Any) -> Node:
    """Return a copy of ``node`` with ``changes`` applied, keeping its location."""
    new = replace(node, **changes)
    new.loc = node.loc
    return new


def iter_child_nodes(node: Node):
    """Yield every direct child node of ``node`` in field order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


class NodeVisitor:
    """
    Walks a tree calling ``visit_<ClassName>`` for every node.

    Nodes without a dedicated handler fall through to ``generic_visit``,
    which visits their children.
    """

    def visit(self, node: Node) -> Any:
        handler = getattr(self, f"visit_{type(node).__name__}", None)
        if handler:
            return handler(node)
        return self.generic_visit(node)

    def generic_visit(self, node: Node) -> Any:
        for child in iter_child_nodes(node):
            self.visit(child)


class NodeTransformer(NodeVisitor):
    """
    A visitor whose handlers return the replacement for the node visited.

    Returning the node keeps it, returning ``None`` drops it from a list
    field, and returning a list splices every item into the parent list.
    Parents are rebuilt from these results rather than edited in place.
    """

    def generic_visit(self, node: Node) -> Node:
        changes = {}
        for f in fields(node):
            value = getattr(node, f.name)
            if isinstance(value, Node):
                result = self.visit(value)
                if result is not value:
                    changes[f.name] = result
            elif isinstance(value, list):
                items, changed = self._visit_list(value)
                if changed:
                    changes[f.name] = items
        if changes:
            return copy_node(node, **changes)
        return node

    def _visit_list(self, values: List[Any]):
        items = []
        changed = False
        for item in values:
            if not isinstance(item, Node):
                items.append(item)
                continue
            result = self.visit(item)
            if result is None:
                changed = True
            elif isinstance(result, list):
                items.extend(result)
                changed = True
            else:
                changed = changed or result is not item
                items.append(result)
        return items, changed
