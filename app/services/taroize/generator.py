"""
Code generator for the taroize AST.

Prints script and JSX trees back to JavaScript source. Output uses two-space
indentation, single-quoted strings and explicit semicolons; parentheses are
inserted only where operator precedence requires them.
"""
import re
from typing import List, Optional

from . import nodes as n


BINARY_PRECEDENCE = {
    "??": 1,
    "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6, "!=": 6, "===": 6, "!==": 6,
    "<": 7, ">": 7, "<=": 7, ">=": 7, "instanceof": 7, "in": 7,
    "<<": 8, ">>": 8, ">>>": 8,
    "+": 9, "-": 9,
    "*": 10, "/": 10, "%": 10,
    "**": 11,
}

PREC_SEQUENCE = 1
PREC_ASSIGN = 2
PREC_CONDITIONAL = 3
PREC_UNARY = 15
PREC_UPDATE = 16
PREC_CALL = 18
PREC_PRIMARY = 19

# Binary operators sit between conditional and unary
BINARY_OFFSET = PREC_CONDITIONAL

STRING_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

# Expression statements that would otherwise parse as a declaration or block
AMBIGUOUS_STATEMENT_START = re.compile(r"^(\{|function\b|class\b|async function\b|let \[)")

JSX_TEXT_SPECIAL = re.compile(r"[{}<>]")


def quote_string(value: str) -> str:
    """Quote ``value`` as a single-quoted JavaScript string literal."""
    out = []
    for ch in value:
        if ch in STRING_ESCAPES:
            out.append(STRING_ESCAPES[ch])
        elif ord(ch) < 0x20:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    return "'" + "".join(out) + "'"


def format_number(node: n.NumericLiteral) -> str:
    if node.raw:
        return node.raw
    value = node.value
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def precedence(node: n.Node) -> int:
    if isinstance(node, n.SequenceExpression):
        return PREC_SEQUENCE
    if isinstance(node, (n.AssignmentExpression, n.ArrowFunctionExpression, n.YieldExpression)):
        return PREC_ASSIGN
    if isinstance(node, n.ConditionalExpression):
        return PREC_CONDITIONAL
    if isinstance(node, (n.BinaryExpression, n.LogicalExpression)):
        return BINARY_OFFSET + BINARY_PRECEDENCE[node.operator]
    if isinstance(node, (n.UnaryExpression, n.AwaitExpression)):
        return PREC_UNARY
    if isinstance(node, n.UpdateExpression):
        return PREC_UPDATE
    if isinstance(node, (n.CallExpression, n.MemberExpression, n.NewExpression,
                         n.TaggedTemplateExpression)):
        return PREC_CALL
    return PREC_PRIMARY


def _contains_call(node: n.Node) -> bool:
    """True if a member chain used as a ``new`` callee contains a call."""
    while True:
        if isinstance(node, n.CallExpression):
            return True
        if isinstance(node, n.MemberExpression):
            node = node.object
        elif isinstance(node, n.TaggedTemplateExpression):
            node = node.tag
        else:
            return False


def _mixes_nullish(operator: str, child: n.Node) -> bool:
    """``??`` cannot be mixed with ``||``/``&&`` without parentheses."""
    if not isinstance(child, n.LogicalExpression):
        return False
    if operator == "??":
        return child.operator in ("||", "&&")
    if operator in ("||", "&&"):
        return child.operator == "??"
    return False


class CodeGenerator:
    """
    Prints AST nodes as JavaScript source.

    Every ``_print_<NodeType>`` method returns text whose first line carries
    no indentation and whose following lines are indented absolutely for
    the current nesting level.

    Example:
        code = CodeGenerator().generate(program)
    """

    def __init__(self, indent: str = "  "):
        self.indent = indent
        self.level = 0

    def generate(self, node: n.Node) -> str:
        """
        Print ``node`` and everything beneath it.

        Args:
            node: Program, statement, expression or JSX node

        Returns:
            JavaScript source text
        """
        self.level = 0
        return self._print(node)

    # ============ Helpers ============

    def _pad(self) -> str:
        return self.indent * self.level

    def _print(self, node: n.Node) -> str:
        printer = getattr(self, f"_print_{type(node).__name__}", None)
        if printer is None:
            raise ValueError(f"Cannot print node of type {type(node).__name__}")
        return printer(node)

    def _expr(self, node: n.Node, min_precedence: int = PREC_SEQUENCE) -> str:
        text = self._print(node)
        if precedence(node) < min_precedence:
            return f"({text})"
        return text

    def _block(self, statements: List[n.Node]) -> str:
        if not statements:
            return "{}"
        self.level += 1
        lines = [self._pad() + self._print(statement) for statement in statements]
        self.level -= 1
        return "{\n" + "\n".join(lines) + "\n" + self._pad() + "}"

    def _params(self, params: List[n.Node]) -> str:
        return ", ".join(self._expr(param, PREC_ASSIGN) for param in params)

    def _arguments(self, arguments: List[n.Node]) -> str:
        return ", ".join(self._expr(argument, PREC_ASSIGN) for argument in arguments)

    def _property_key(self, key: n.Node, computed: bool) -> str:
        if computed:
            return f"[{self._expr(key, PREC_ASSIGN)}]"
        if isinstance(key, n.Identifier):
            return key.name
        return self._print(key)

    def _body(self, node: n.Node) -> str:
        """Print a statement used as the body of a compound statement."""
        if isinstance(node, n.BlockStatement):
            return " " + self._print(node)
        self.level += 1
        text = "\n" + self._pad() + self._print(node)
        self.level -= 1
        return text

    def _decorators(self, decorators: List[n.Decorator]) -> str:
        return "".join(f"{self._print(decorator)}\n{self._pad()}" for decorator in decorators)

    # ============ Program & statements ============

    def _print_Program(self, node: n.Program) -> str:
        lines = [self._print(statement) for statement in node.body]
        return "\n".join(lines) + "\n" if lines else ""

    def _print_ExpressionStatement(self, node: n.ExpressionStatement) -> str:
        text = self._expr(node.expression)
        if AMBIGUOUS_STATEMENT_START.match(text):
            text = f"({text})"
        return text + ";"

    def _print_BlockStatement(self, node: n.BlockStatement) -> str:
        return self._block(node.body)

    def _print_EmptyStatement(self, node: n.EmptyStatement) -> str:
        return ";"

    def _print_DebuggerStatement(self, node: n.DebuggerStatement) -> str:
        return "debugger;"

    def _declaration(self, node: n.VariableDeclaration) -> str:
        declarators = []
        for declarator in node.declarations:
            text = self._print(declarator.id)
            if declarator.init is not None:
                text += " = " + self._expr(declarator.init, PREC_ASSIGN)
            declarators.append(text)
        return f"{node.kind} " + ", ".join(declarators)

    def _print_VariableDeclaration(self, node: n.VariableDeclaration) -> str:
        return self._declaration(node) + ";"

    def _function(self, keyword: str, node: n.Node) -> str:
        prefix = "async " if node.is_async else ""
        star = "*" if node.generator else ""
        name = f" {node.id.name}" if node.id else ""
        return f"{prefix}{keyword}{star}{name}({self._params(node.params)}) {self._print(node.body)}"

    def _print_FunctionDeclaration(self, node: n.FunctionDeclaration) -> str:
        return self._function("function", node)

    def _print_FunctionExpression(self, node: n.FunctionExpression) -> str:
        return self._function("function", node)

    def _class(self, node: n.Node, with_decorators: bool = True) -> str:
        text = self._decorators(node.decorators) if with_decorators else ""
        text += "class"
        if node.id:
            text += f" {node.id.name}"
        if node.superclass is not None:
            text += " extends " + self._expr(node.superclass, PREC_CALL)
        if not node.body:
            return text + " {}"
        self.level += 1
        members = [self._pad() + self._print(member) for member in node.body]
        self.level -= 1
        return text + " {\n" + "\n\n".join(members) + "\n" + self._pad() + "}"

    def _print_ClassDeclaration(self, node: n.ClassDeclaration) -> str:
        return self._class(node)

    def _print_ClassExpression(self, node: n.ClassExpression) -> str:
        return self._class(node)

    def _print_Decorator(self, node: n.Decorator) -> str:
        return "@" + self._expr(node.expression, PREC_CALL)

    def _print_ClassMethod(self, node: n.ClassMethod) -> str:
        text = self._decorators(node.decorators)
        if node.static:
            text += "static "
        text += self._method_head(node)
        return text + f"({self._params(node.params)}) {self._print(node.body)}"

    def _method_head(self, node: n.Node) -> str:
        text = ""
        if node.is_async:
            text += "async "
        if node.generator:
            text += "*"
        if node.kind in ("get", "set"):
            text += f"{node.kind} "
        return text + self._property_key(node.key, node.computed)

    def _print_ClassProperty(self, node: n.ClassProperty) -> str:
        text = self._decorators(node.decorators)
        if node.static:
            text += "static "
        text += self._property_key(node.key, node.computed)
        if node.value is not None:
            text += " = " + self._expr(node.value, PREC_ASSIGN)
        return text + ";"

    def _print_ReturnStatement(self, node: n.ReturnStatement) -> str:
        if node.argument is None:
            return "return;"
        return f"return {self._expr(node.argument)};"

    def _print_IfStatement(self, node: n.IfStatement) -> str:
        consequent = node.consequent
        # keep a trailing else from attaching to a nested if
        if node.alternate is not None and isinstance(consequent, n.IfStatement) and consequent.alternate is None:
            consequent = n.BlockStatement([consequent])
        text = f"if ({self._expr(node.test)})" + self._body(consequent)
        if node.alternate is None:
            return text
        if isinstance(consequent, n.BlockStatement):
            text += " else"
        else:
            text += "\n" + self._pad() + "else"
        if isinstance(node.alternate, n.IfStatement):
            return text + " " + self._print(node.alternate)
        return text + self._body(node.alternate)

    def _print_ForStatement(self, node: n.ForStatement) -> str:
        if node.init is None:
            init = ""
        elif isinstance(node.init, n.VariableDeclaration):
            init = self._declaration(node.init)
        else:
            init = self._expr(node.init)
        test = self._expr(node.test) if node.test is not None else ""
        update = self._expr(node.update) if node.update is not None else ""
        head = f"for ({init};{' ' + test if test else ''};{' ' + update if update else ''})"
        return head + self._body(node.body)

    def _for_left(self, left: n.Node) -> str:
        if isinstance(left, n.VariableDeclaration):
            return self._declaration(left)
        return self._print(left)

    def _print_ForInStatement(self, node: n.ForInStatement) -> str:
        head = f"for ({self._for_left(node.left)} in {self._expr(node.right)})"
        return head + self._body(node.body)

    def _print_ForOfStatement(self, node: n.ForOfStatement) -> str:
        keyword = "for await" if node.is_await else "for"
        head = f"{keyword} ({self._for_left(node.left)} of {self._expr(node.right, PREC_ASSIGN)})"
        return head + self._body(node.body)

    def _print_WhileStatement(self, node: n.WhileStatement) -> str:
        return f"while ({self._expr(node.test)})" + self._body(node.body)

    def _print_DoWhileStatement(self, node: n.DoWhileStatement) -> str:
        body = self._body(node.body)
        separator = " " if isinstance(node.body, n.BlockStatement) else "\n" + self._pad()
        return f"do{body}{separator}while ({self._expr(node.test)});"

    def _print_BreakStatement(self, node: n.BreakStatement) -> str:
        return f"break {node.label.name};" if node.label else "break;"

    def _print_ContinueStatement(self, node: n.ContinueStatement) -> str:
        return f"continue {node.label.name};" if node.label else "continue;"

    def _print_ThrowStatement(self, node: n.ThrowStatement) -> str:
        return f"throw {self._expr(node.argument)};"

    def _print_TryStatement(self, node: n.TryStatement) -> str:
        text = "try " + self._print(node.block)
        if node.handler is not None:
            text += " " + self._print(node.handler)
        if node.finalizer is not None:
            text += " finally " + self._print(node.finalizer)
        return text

    def _print_CatchClause(self, node: n.CatchClause) -> str:
        if node.param is None:
            return "catch " + self._print(node.body)
        return f"catch ({self._print(node.param)}) " + self._print(node.body)

    def _print_SwitchStatement(self, node: n.SwitchStatement) -> str:
        text = f"switch ({self._expr(node.discriminant)}) {{"
        self.level += 1
        for case in node.cases:
            text += "\n" + self._pad() + self._print(case)
        self.level -= 1
        return text + "\n" + self._pad() + "}"

    def _print_SwitchCase(self, node: n.SwitchCase) -> str:
        text = f"case {self._expr(node.test)}:" if node.test is not None else "default:"
        self.level += 1
        for statement in node.consequent:
            text += "\n" + self._pad() + self._print(statement)
        self.level -= 1
        return text

    def _print_LabeledStatement(self, node: n.LabeledStatement) -> str:
        return f"{node.label.name}: " + self._print(node.body)

    # ============ Modules ============

    def _print_ImportDeclaration(self, node: n.ImportDeclaration) -> str:
        source = quote_string(node.source.value)
        if not node.specifiers:
            return f"import {source};"
        parts = []
        named = []
        for specifier in node.specifiers:
            if isinstance(specifier, n.ImportDefaultSpecifier):
                parts.append(specifier.local.name)
            elif isinstance(specifier, n.ImportNamespaceSpecifier):
                parts.append(f"* as {specifier.local.name}")
            elif specifier.imported.name == specifier.local.name:
                named.append(specifier.local.name)
            else:
                named.append(f"{specifier.imported.name} as {specifier.local.name}")
        if named:
            parts.append("{ " + ", ".join(named) + " }")
        return f"import {', '.join(parts)} from {source};"

    def _print_ExportNamedDeclaration(self, node: n.ExportNamedDeclaration) -> str:
        if node.declaration is not None:
            if isinstance(node.declaration, n.ClassDeclaration) and node.declaration.decorators:
                return self._decorators(node.declaration.decorators) + "export " + self._class(
                    node.declaration, with_decorators=False
                )
            return "export " + self._print(node.declaration)
        specifiers = []
        for specifier in node.specifiers:
            if specifier.local.name == specifier.exported.name:
                specifiers.append(specifier.local.name)
            else:
                specifiers.append(f"{specifier.local.name} as {specifier.exported.name}")
        text = "export { " + ", ".join(specifiers) + " }" if specifiers else "export {}"
        if node.source is not None:
            text += " from " + quote_string(node.source.value)
        return text + ";"

    def _print_ExportDefaultDeclaration(self, node: n.ExportDefaultDeclaration) -> str:
        declaration = node.declaration
        if isinstance(declaration, n.ClassDeclaration):
            return self._decorators(declaration.decorators) + "export default " + self._class(
                declaration, with_decorators=False
            )
        if isinstance(declaration, n.FunctionDeclaration):
            return "export default " + self._print(declaration)
        return f"export default {self._expr(declaration, PREC_ASSIGN)};"

    def _print_ExportAllDeclaration(self, node: n.ExportAllDeclaration) -> str:
        return f"export * from {quote_string(node.source.value)};"

    # ============ Expressions ============

    def _print_Identifier(self, node: n.Identifier) -> str:
        return node.name

    def _print_StringLiteral(self, node: n.StringLiteral) -> str:
        return quote_string(node.value)

    def _print_NumericLiteral(self, node: n.NumericLiteral) -> str:
        return format_number(node)

    def _print_BooleanLiteral(self, node: n.BooleanLiteral) -> str:
        return "true" if node.value else "false"

    def _print_NullLiteral(self, node: n.NullLiteral) -> str:
        return "null"

    def _print_RegExpLiteral(self, node: n.RegExpLiteral) -> str:
        return f"/{node.pattern}/{node.flags}"

    def _print_ThisExpression(self, node: n.ThisExpression) -> str:
        return "this"

    def _print_Super(self, node: n.Super) -> str:
        return "super"

    def _print_TemplateLiteral(self, node: n.TemplateLiteral) -> str:
        parts = [node.quasis[0]]
        for expression, quasi in zip(node.expressions, node.quasis[1:]):
            parts.append("${" + self._expr(expression) + "}")
            parts.append(quasi)
        return "`" + "".join(parts) + "`"

    def _print_TaggedTemplateExpression(self, node: n.TaggedTemplateExpression) -> str:
        return self._expr(node.tag, PREC_CALL) + self._print(node.quasi)

    def _print_ArrayExpression(self, node: n.ArrayExpression) -> str:
        items = ["" if element is None else self._expr(element, PREC_ASSIGN) for element in node.elements]
        if node.elements and node.elements[-1] is None:
            items.append("")
        return "[" + ", ".join(items) + "]"

    def _print_ObjectExpression(self, node: n.ObjectExpression) -> str:
        if not node.properties:
            return "{}"
        self.level += 1
        items = [self._pad() + self._print(prop) for prop in node.properties]
        self.level -= 1
        return "{\n" + ",\n".join(items) + "\n" + self._pad() + "}"

    def _print_ObjectProperty(self, node: n.ObjectProperty) -> str:
        key, value = node.key, node.value
        if not node.computed and isinstance(key, n.Identifier):
            if isinstance(value, n.Identifier) and value.name == key.name:
                return key.name
            if (
                node.shorthand
                and isinstance(value, n.AssignmentPattern)
                and isinstance(value.left, n.Identifier)
                and value.left.name == key.name
            ):
                return self._print(value)
        return f"{self._property_key(key, node.computed)}: {self._expr(value, PREC_ASSIGN)}"

    def _print_ObjectMethod(self, node: n.ObjectMethod) -> str:
        return self._method_head(node) + f"({self._params(node.params)}) {self._print(node.body)}"

    def _print_SpreadElement(self, node: n.SpreadElement) -> str:
        return "..." + self._expr(node.argument, PREC_ASSIGN)

    def _print_ArrowFunctionExpression(self, node: n.ArrowFunctionExpression) -> str:
        prefix = "async " if node.is_async else ""
        if len(node.params) == 1 and isinstance(node.params[0], n.Identifier) and not node.is_async:
            params = node.params[0].name
        else:
            params = f"({self._params(node.params)})"
        if isinstance(node.body, n.BlockStatement):
            body = self._print(node.body)
        else:
            body = self._expr(node.body, PREC_ASSIGN)
            if body.startswith("{"):
                body = f"({body})"
        return f"{prefix}{params} => {body}"

    def _print_UnaryExpression(self, node: n.UnaryExpression) -> str:
        argument = self._expr(node.argument, PREC_UNARY)
        operator = node.operator
        if operator.isalpha() or (operator in "+-" and argument.startswith(operator)):
            return f"{operator} {argument}"
        return operator + argument

    def _print_UpdateExpression(self, node: n.UpdateExpression) -> str:
        if node.prefix:
            return node.operator + self._expr(node.argument, PREC_UNARY)
        return self._expr(node.argument, PREC_UPDATE + 1) + node.operator

    def _binary(self, node: n.Node) -> str:
        operator = node.operator
        prec = precedence(node)
        if operator == "**":
            # unary operands of ** must be parenthesized
            left_min, right_min = max(prec + 1, PREC_UNARY + 1), prec
        else:
            left_min, right_min = prec, prec + 1

        left = self._expr(node.left, left_min)
        if _mixes_nullish(operator, node.left) and not left.startswith("("):
            left = f"({left})"
        right = self._expr(node.right, right_min)
        if _mixes_nullish(operator, node.right) and not right.startswith("("):
            right = f"({right})"
        return f"{left} {operator} {right}"

    def _print_BinaryExpression(self, node: n.BinaryExpression) -> str:
        return self._binary(node)

    def _print_LogicalExpression(self, node: n.LogicalExpression) -> str:
        return self._binary(node)

    def _print_AssignmentExpression(self, node: n.AssignmentExpression) -> str:
        return f"{self._print(node.left)} {node.operator} {self._expr(node.right, PREC_ASSIGN)}"

    def _print_ConditionalExpression(self, node: n.ConditionalExpression) -> str:
        test = self._expr(node.test, PREC_CONDITIONAL + 1)
        consequent = self._expr(node.consequent, PREC_ASSIGN)
        alternate = self._expr(node.alternate, PREC_ASSIGN)
        return f"{test} ? {consequent} : {alternate}"

    def _print_CallExpression(self, node: n.CallExpression) -> str:
        callee = self._expr(node.callee, PREC_CALL)
        optional = "?." if node.optional else ""
        return f"{callee}{optional}({self._arguments(node.arguments)})"

    def _print_NewExpression(self, node: n.NewExpression) -> str:
        callee = self._expr(node.callee, PREC_CALL)
        if _contains_call(node.callee) and not callee.startswith("("):
            callee = f"({callee})"
        return f"new {callee}({self._arguments(node.arguments)})"

    def _print_MemberExpression(self, node: n.MemberExpression) -> str:
        obj = self._expr(node.object, PREC_CALL)
        if isinstance(node.object, n.NumericLiteral) and re.fullmatch(r"\d+", obj):
            obj = f"({obj})"
        if node.computed:
            access = "?.[" if node.optional else "["
            return f"{obj}{access}{self._expr(node.property)}]"
        access = "?." if node.optional else "."
        return f"{obj}{access}{node.property.name}"

    def _print_SequenceExpression(self, node: n.SequenceExpression) -> str:
        return ", ".join(self._expr(expression, PREC_ASSIGN) for expression in node.expressions)

    def _print_AwaitExpression(self, node: n.AwaitExpression) -> str:
        return "await " + self._expr(node.argument, PREC_UNARY)

    def _print_YieldExpression(self, node: n.YieldExpression) -> str:
        keyword = "yield*" if node.delegate else "yield"
        if node.argument is None:
            return keyword
        return f"{keyword} {self._expr(node.argument, PREC_ASSIGN)}"

    # ============ Patterns ============

    def _print_ObjectPattern(self, node: n.ObjectPattern) -> str:
        if not node.properties:
            return "{}"
        return "{ " + ", ".join(self._print(prop) for prop in node.properties) + " }"

    def _print_ArrayPattern(self, node: n.ArrayPattern) -> str:
        items = ["" if element is None else self._print(element) for element in node.elements]
        if node.elements and node.elements[-1] is None:
            items.append("")
        return "[" + ", ".join(items) + "]"

    def _print_AssignmentPattern(self, node: n.AssignmentPattern) -> str:
        return f"{self._print(node.left)} = {self._expr(node.right, PREC_ASSIGN)}"

    def _print_RestElement(self, node: n.RestElement) -> str:
        return "..." + self._print(node.argument)

    # ============ JSX ============

    def _print_JSXElement(self, node: n.JSXElement) -> str:
        attributes = "".join(" " + self._print(attribute) for attribute in node.attributes)
        children = node.children
        if not children:
            return f"<{node.name}{attributes} />"
        if len(children) == 1 and isinstance(children[0], n.JSXText):
            return f"<{node.name}{attributes}>{self._jsx_text(children[0].value)}</{node.name}>"

        self.level += 1
        lines = []
        for child in children:
            text = self._jsx_text(child.value.strip()) if isinstance(child, n.JSXText) else self._print(child)
            if text:
                lines.append(self._pad() + text)
        self.level -= 1
        return f"<{node.name}{attributes}>\n" + "\n".join(lines) + f"\n{self._pad()}</{node.name}>"

    def _jsx_text(self, value: str) -> str:
        if JSX_TEXT_SPECIAL.search(value):
            return "{" + quote_string(value) + "}"
        return value

    def _print_JSXText(self, node: n.JSXText) -> str:
        return self._jsx_text(node.value)

    def _print_JSXAttribute(self, node: n.JSXAttribute) -> str:
        value: Optional[n.Node] = node.value
        if value is None:
            return node.name
        if isinstance(value, n.StringLiteral):
            if '"' not in value.value:
                return f'{node.name}="{value.value}"'
            if "'" not in value.value:
                return f"{node.name}='{value.value}'"
            return f"{node.name}={{{quote_string(value.value)}}}"
        return f"{node.name}={self._print(value)}"

    def _print_JSXExpressionContainer(self, node: n.JSXExpressionContainer) -> str:
        return "{" + self._expr(node.expression, PREC_ASSIGN) + "}"


def generate(node: n.Node) -> str:
    """Print ``node`` as JavaScript source."""
    return CodeGenerator().generate(node)
