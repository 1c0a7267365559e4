"""
Mini-program script to Taro class component conversion.

The script is parsed, the ``wx`` namespace is moved to ``Taro`` and the
``Page``/``Component``/``App`` registration call is replaced by a
default-exported class component whose render method returns the
converted template.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from . import nodes as n
from .errors import InvalidKeyError, StructuralUnsupportedError
from .lifecycle import PAGE_LIFECYCLE
from .parser import parse
from .utils import build_import_statement

logger = logging.getLogger(__name__)


DEFAULT_SCRIPT = "Page({})"
REGISTRATION_KINDS = ("Page", "Component", "App")
GLOBAL_GETTERS = ("getApp", "getCurrentPages")


@dataclass
class ComponentDefinition:
    """A registration call turned into class members."""
    kind: str
    state_keys: List[str] = field(default_factory=list)
    members: List[n.Node] = field(default_factory=list)
    config: Optional[n.ObjectExpression] = None


@dataclass
class ScriptResult:
    ast: n.Program
    definition: Optional[ComponentDefinition] = None


# ============ Scope analysis ============

def pattern_names(pattern: Optional[n.Node]) -> List[str]:
    """Names bound by a binding pattern."""
    if pattern is None:
        return []
    if isinstance(pattern, n.Identifier):
        return [pattern.name]
    if isinstance(pattern, n.ObjectPattern):
        names = []
        for prop in pattern.properties:
            names.extend(pattern_names(prop.argument if isinstance(prop, n.RestElement) else prop.value))
        return names
    if isinstance(pattern, n.ArrayPattern):
        names = []
        for element in pattern.elements:
            names.extend(pattern_names(element))
        return names
    if isinstance(pattern, n.AssignmentPattern):
        return pattern_names(pattern.left)
    if isinstance(pattern, n.RestElement):
        return pattern_names(pattern.argument)
    return []


class VarCollector(n.NodeVisitor):
    """Collects ``var`` names hoisted to the enclosing function scope."""

    def __init__(self):
        self.names: Set[str] = set()

    def visit_VariableDeclaration(self, node: n.VariableDeclaration):
        if node.kind == "var":
            for declarator in node.declarations:
                self.names.update(pattern_names(declarator.id))
        self.generic_visit(node)

    def _skip(self, node):
        pass

    visit_FunctionDeclaration = _skip
    visit_FunctionExpression = _skip
    visit_ArrowFunctionExpression = _skip
    visit_ObjectMethod = _skip
    visit_ClassMethod = _skip
    visit_ClassProperty = _skip


def lexical_names(statements: Sequence[n.Node]) -> Set[str]:
    """Names declared directly in a statement list by let/const/class/function/import."""
    names: Set[str] = set()
    for statement in statements:
        if isinstance(statement, (n.ExportNamedDeclaration, n.ExportDefaultDeclaration)):
            statement = statement.declaration
        if isinstance(statement, n.VariableDeclaration) and statement.kind != "var":
            for declarator in statement.declarations:
                names.update(pattern_names(declarator.id))
        elif isinstance(statement, (n.FunctionDeclaration, n.ClassDeclaration)) and statement.id:
            names.add(statement.id.name)
        elif isinstance(statement, n.ImportDeclaration):
            names.update(specifier.local.name for specifier in statement.specifiers)
    return names


def hoisted_names(statements: Sequence[n.Node]) -> Set[str]:
    collector = VarCollector()
    for statement in statements:
        collector.visit(statement)
    return collector.names | lexical_names(statements)


class NamespaceRenamer(n.NodeTransformer):
    """
    Renames every reference bound to a local declaration of ``old``.

    A stack of scopes records the names each function, block, catch clause
    and loop head declares. An identifier is renamed only when some
    enclosing scope declares it; a reference to the global ``wx`` object is
    left to ``CallRewriter``.
    """

    def __init__(self, old: str, new: str):
        self.old = old
        self.new = new
        self.scopes: List[Set[str]] = []

    def _is_bound(self) -> bool:
        return any(self.old in scope for scope in self.scopes)

    def _in_scope(self, names: Set[str], visit, *args):
        self.scopes.append(names)
        try:
            return visit(*args)
        finally:
            self.scopes.pop()

    def _visit_statements(self, statements: List[n.Node]) -> List[n.Node]:
        return self._visit_list(statements)[0]

    def _visit_optional(self, node: Optional[n.Node]) -> Optional[n.Node]:
        return None if node is None else self.visit(node)

    def visit_Identifier(self, node: n.Identifier) -> n.Identifier:
        if node.name == self.old and self._is_bound():
            return n.copy_node(node, name=self.new)
        return node

    # ============ Scopes ============

    def visit_Program(self, node: n.Program) -> n.Program:
        return self._in_scope(hoisted_names(node.body), self.generic_visit, node)

    def visit_BlockStatement(self, node: n.BlockStatement) -> n.BlockStatement:
        return self._in_scope(lexical_names(node.body), self.generic_visit, node)

    def _function(self, node: n.Node, **changes) -> n.Node:
        names: Set[str] = set()
        for param in node.params:
            names.update(pattern_names(param))
        if isinstance(node, n.FunctionExpression) and node.id:
            names.add(node.id.name)
        body = node.body
        if isinstance(body, n.BlockStatement):
            names |= hoisted_names(body.body)

        def visit_parts():
            params = self._visit_statements(node.params)
            if isinstance(body, n.BlockStatement):
                new_body = n.copy_node(body, body=self._visit_statements(body.body))
            else:
                new_body = self.visit(body)
            return n.copy_node(node, params=params, body=new_body, **changes)

        return self._in_scope(names, visit_parts)

    def visit_FunctionDeclaration(self, node: n.FunctionDeclaration) -> n.FunctionDeclaration:
        return self._function(node, id=self._visit_optional(node.id))

    def visit_FunctionExpression(self, node: n.FunctionExpression) -> n.FunctionExpression:
        return self._function(node)

    def visit_ArrowFunctionExpression(self, node: n.ArrowFunctionExpression) -> n.ArrowFunctionExpression:
        return self._function(node)

    def visit_ObjectMethod(self, node: n.ObjectMethod) -> n.ObjectMethod:
        key = self.visit(node.key) if node.computed else node.key
        return self._function(node, key=key)

    def visit_ClassMethod(self, node: n.ClassMethod) -> n.ClassMethod:
        key = self.visit(node.key) if node.computed else node.key
        return self._function(node, key=key, decorators=self._visit_statements(node.decorators))

    def visit_CatchClause(self, node: n.CatchClause) -> n.CatchClause:
        return self._in_scope(set(pattern_names(node.param)), self.generic_visit, node)

    def _loop(self, node: n.Node, head: Optional[n.Node]) -> n.Node:
        names: Set[str] = set()
        if isinstance(head, n.VariableDeclaration) and head.kind != "var":
            for declarator in head.declarations:
                names.update(pattern_names(declarator.id))
        return self._in_scope(names, self.generic_visit, node)

    def visit_ForStatement(self, node: n.ForStatement) -> n.ForStatement:
        return self._loop(node, node.init)

    def visit_ForInStatement(self, node: n.ForInStatement) -> n.ForInStatement:
        return self._loop(node, node.left)

    def visit_ForOfStatement(self, node: n.ForOfStatement) -> n.ForOfStatement:
        return self._loop(node, node.left)

    def visit_SwitchStatement(self, node: n.SwitchStatement) -> n.SwitchStatement:
        names: Set[str] = set()
        for case in node.cases:
            names |= lexical_names(case.consequent)
        return self._in_scope(names, self.generic_visit, node)

    # ============ Non-reference identifiers ============

    def visit_MemberExpression(self, node: n.MemberExpression) -> n.MemberExpression:
        prop = self.visit(node.property) if node.computed else node.property
        return n.copy_node(node, object=self.visit(node.object), property=prop)

    def visit_ObjectProperty(self, node: n.ObjectProperty) -> n.ObjectProperty:
        key = self.visit(node.key) if node.computed else node.key
        return n.copy_node(node, key=key, value=self.visit(node.value))

    def visit_ClassProperty(self, node: n.ClassProperty) -> n.ClassProperty:
        key = self.visit(node.key) if node.computed else node.key
        return n.copy_node(
            node,
            key=key,
            value=self._visit_optional(node.value),
            decorators=self._visit_statements(node.decorators),
        )

    def visit_LabeledStatement(self, node: n.LabeledStatement) -> n.LabeledStatement:
        return n.copy_node(node, body=self.visit(node.body))

    def visit_BreakStatement(self, node: n.BreakStatement) -> n.BreakStatement:
        return node

    def visit_ContinueStatement(self, node: n.ContinueStatement) -> n.ContinueStatement:
        return node

    def visit_ImportSpecifier(self, node: n.ImportSpecifier) -> n.ImportSpecifier:
        return n.copy_node(node, local=self.visit(node.local))

    def visit_ExportSpecifier(self, node: n.ExportSpecifier) -> n.ExportSpecifier:
        return n.copy_node(node, local=self.visit(node.local))


class CallRewriter(n.NodeTransformer):
    """
    Moves calls on the mini-program globals onto the target namespace.

    ``getApp()`` and ``getCurrentPages()`` become ``Taro.getApp()`` and
    ``Taro.getCurrentPages()``; ``wx.foo()`` becomes ``Taro.foo()``.
    """

    def __init__(self, old: str, new: str):
        self.old = old
        self.new = new

    def visit_CallExpression(self, node: n.CallExpression) -> n.CallExpression:
        node = self.generic_visit(node)
        callee = node.callee
        if isinstance(callee, n.Identifier) and callee.name in GLOBAL_GETTERS:
            member = n.MemberExpression(n.Identifier(self.new), callee)
            member.loc = callee.loc
            return n.copy_node(node, callee=member)
        if (
            isinstance(callee, n.MemberExpression)
            and isinstance(callee.object, n.Identifier)
            and callee.object.name == self.old
        ):
            target = n.copy_node(callee.object, name=self.new)
            return n.copy_node(node, callee=n.copy_node(callee, object=target))
        return node


# ============ Component extraction ============

def registration_kind(statement: n.Node) -> Optional[str]:
    """The registration kind if ``statement`` is a top-level ``Page(...)``-style call."""
    if not isinstance(statement, n.ExpressionStatement):
        return None
    call = statement.expression
    if isinstance(call, n.CallExpression) and isinstance(call.callee, n.Identifier):
        if call.callee.name in REGISTRATION_KINDS:
            return call.callee.name
    return None


class RegistrationCallFinder(n.NodeVisitor):
    """Collects every ``Page(...)``-style call in a subtree."""

    def __init__(self):
        self.calls: List[n.CallExpression] = []

    def visit_CallExpression(self, node: n.CallExpression):
        if isinstance(node.callee, n.Identifier) and node.callee.name in REGISTRATION_KINDS:
            self.calls.append(node)
        self.generic_visit(node)


def nested_registrations(statement: n.Node) -> List[n.CallExpression]:
    finder = RegistrationCallFinder()
    finder.visit(statement)
    return finder.calls


def _function_body(function: n.Node) -> n.BlockStatement:
    if isinstance(function.body, n.BlockStatement):
        return function.body
    return n.BlockStatement([n.ReturnStatement(function.body)])


def _as_arrow(function: n.Node) -> n.ArrowFunctionExpression:
    arrow = n.ArrowFunctionExpression(function.params, function.body, function.is_async)
    arrow.loc = function.loc
    return arrow


def extract_definition(
    kind: str,
    config: n.ObjectExpression,
    json: Optional[n.ObjectExpression] = None,
) -> ComponentDefinition:
    """
    Turn the registration object into class members.

    Args:
        kind: "Page", "Component" or "App"
        config: The object literal passed to the registration call
        json: Optional page configuration added as a ``config`` member

    Returns:
        ComponentDefinition with the ordered members and state keys

    Raises:
        StructuralUnsupportedError: If the object contains a spread property
        InvalidKeyError: If a property key is not a plain identifier
    """
    for prop in config.properties:
        if isinstance(prop, n.SpreadElement):
            raise StructuralUnsupportedError.at(
                prop, f"Spread properties (`...`) are not supported in a {kind} object"
            )

    definition = ComponentDefinition(kind, config=json)
    for prop in config.properties:
        if prop.computed or not isinstance(prop.key, n.Identifier):
            raise InvalidKeyError.at(prop.key, f"{kind} object keys must be plain identifiers")
        name = prop.key.name

        if name == "data":
            value = _as_arrow(prop) if isinstance(prop, n.ObjectMethod) else prop.value
            if isinstance(value, n.ObjectExpression):
                for state in value.properties:
                    if (
                        isinstance(state, n.ObjectProperty)
                        and not state.computed
                        and isinstance(state.key, n.Identifier)
                        and state.key.name not in definition.state_keys
                    ):
                        definition.state_keys.append(state.key.name)
            definition.members.append(n.ClassProperty(n.Identifier("state"), value))

        elif name in PAGE_LIFECYCLE:
            definition.members.append(_lifecycle_member(prop, PAGE_LIFECYCLE[name]))

        elif isinstance(prop, n.ObjectMethod):
            if prop.kind in ("get", "set") or prop.generator:
                definition.members.append(n.ClassMethod(
                    prop.kind, prop.key, prop.params, prop.body,
                    is_async=prop.is_async, generator=prop.generator,
                ))
            else:
                definition.members.append(n.ClassProperty(prop.key, _as_arrow(prop)))

        else:
            value = prop.value
            if (
                isinstance(value, n.FunctionExpression) and not value.generator
            ) or isinstance(value, n.ArrowFunctionExpression):
                value = _as_arrow(value)
            definition.members.append(n.ClassProperty(prop.key, value))

    logger.debug(
        f"Extracted {kind} with {len(definition.members)} member(s), state keys {definition.state_keys}"
    )
    return definition


def _lifecycle_member(prop: n.Node, canonical: str) -> n.Node:
    function = prop if isinstance(prop, n.ObjectMethod) else prop.value
    key = n.Identifier(canonical)
    key.loc = prop.key.loc
    if isinstance(function, (n.ObjectMethod, n.FunctionExpression, n.ArrowFunctionExpression)):
        return n.ClassMethod(
            "method",
            key,
            function.params,
            _function_body(function),
            is_async=function.is_async,
            generator=getattr(function, "generator", False),
        )
    return n.ClassProperty(key, function)


def build_render(returned: Optional[n.Node], state_keys: List[str]) -> n.ClassMethod:
    """Build ``render() { const { ...keys } = this.state; return <returned>; }``."""
    body: List[n.Node] = []
    if state_keys:
        pattern = n.ObjectPattern([
            n.ObjectProperty(n.Identifier(key), n.Identifier(key), shorthand=True)
            for key in state_keys
        ])
        state = n.MemberExpression(n.ThisExpression(), n.Identifier("state"))
        body.append(n.VariableDeclaration("const", [n.VariableDeclarator(pattern, state)]))
    body.append(n.ReturnStatement(returned if returned is not None else n.NullLiteral()))
    return n.ClassMethod("method", n.Identifier("render"), [], n.BlockStatement(body))


def build_class(
    definition: ComponentDefinition,
    returned: Optional[n.Node],
    class_name: str,
    target_namespace: str,
    decorator_name: str,
) -> n.ClassDeclaration:
    members = list(definition.members)
    if definition.config is not None:
        members.append(n.ClassProperty(n.Identifier("config"), definition.config))
    members.append(build_render(returned, definition.state_keys))

    name = "App" if definition.kind == "App" else class_name
    superclass = n.MemberExpression(n.Identifier(target_namespace), n.Identifier("Component"))
    decorators = []
    if definition.kind != "App":
        decorators.append(n.Decorator(
            n.CallExpression(n.Identifier(decorator_name), [n.StringLiteral(definition.kind)])
        ))
    return n.ClassDeclaration(n.Identifier(name), superclass, members, decorators)


def build_imports(
    used_components: Sequence[str],
    components_package: str,
    framework_package: str,
    target_namespace: str,
    decorator_package: str,
    decorator_name: str,
) -> List[n.ImportDeclaration]:
    """The three imports every converted module starts with."""
    return [
        build_import_statement(components_package, list(used_components)),
        build_import_statement(framework_package, [], target_namespace),
        build_import_statement(decorator_package, [], decorator_name),
    ]


class ScriptTransformer:
    """
    Converts a registration script into a Taro class component module.

    Example:
        transformer = ScriptTransformer()
        result = transformer.transform("Page({ data: { n: 1 } })")
    """

    def __init__(
        self,
        legacy_namespace: str = "wx",
        target_namespace: str = "Taro",
        class_name: str = "_C",
        components_package: str = "@tarojs/components",
        framework_package: str = "@tarojs/taro",
        decorator_package: str = "@tarojs/with-weapp",
        decorator_name: str = "withWeapp",
    ):
        self.legacy_namespace = legacy_namespace
        self.target_namespace = target_namespace
        self.class_name = class_name
        self.components_package = components_package
        self.framework_package = framework_package
        self.decorator_package = decorator_package
        self.decorator_name = decorator_name

    def transform(
        self,
        script: Optional[str] = None,
        returned: Optional[n.Node] = None,
        json: Optional[n.ObjectExpression] = None,
        used_components: Sequence[str] = (),
    ) -> ScriptResult:
        """
        Transform ``script`` into a module.

        Args:
            script: Script source; ``Page({})`` when empty
            returned: Expression the render method returns
            json: Page configuration object literal
            used_components: Component names for the component library import

        Returns:
            ScriptResult with the module tree and the extracted definition
        """
        program = parse(script or DEFAULT_SCRIPT)
        program = NamespaceRenamer(self.legacy_namespace, self.target_namespace).visit(program)
        program = CallRewriter(self.legacy_namespace, self.target_namespace).visit(program)

        definition = None
        body: List[n.Node] = []
        for statement in program.body:
            kind = registration_kind(statement)
            arguments = statement.expression.arguments if kind else []
            if not arguments or not isinstance(arguments[0], n.ObjectExpression):
                if kind is None:
                    for call in nested_registrations(statement):
                        line = call.loc[0] if call.loc else 0
                        logger.warning(
                            f"Skipping {call.callee.name}() call at line {line}: "
                            f"only top-level registration calls are converted"
                        )
                body.append(statement)
                continue

            definition = extract_definition(kind, arguments[0], json)
            class_declaration = build_class(
                definition, returned, self.class_name, self.target_namespace, self.decorator_name
            )
            export = n.ExportDefaultDeclaration(class_declaration)
            export.loc = statement.loc
            body.append(export)

        if definition is None:
            logger.warning("No Page/Component/App registration with an object argument found")

        imports = build_imports(
            used_components,
            self.components_package,
            self.framework_package,
            self.target_namespace,
            self.decorator_package,
            self.decorator_name,
        )
        return ScriptResult(n.copy_node(program, body=imports + body), definition)


def parse_script(
    script: Optional[str] = None,
    returned: Optional[n.Node] = None,
    json: Optional[n.ObjectExpression] = None,
    used_components: Sequence[str] = (),
) -> n.Program:
    """Transform ``script`` with the default namespaces and return the module tree."""
    return ScriptTransformer().transform(script, returned, json, used_components).ast
