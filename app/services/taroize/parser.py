"""
JavaScript parser wrapper using esprima.

Parses mini-program scripts with esprima and converts the ESTree result into
the dataclass tree from ``nodes``. Every converted node records the line and
column of its start so conversion errors can point at the source.
"""
import re
from typing import Any, List, Optional

import esprima

from . import nodes as n
from .errors import ParseError


# esprima prefixes every message with its line number
MESSAGE_PREFIX = re.compile(r"^Line \d+: ")


class JSParser:
    """
    JavaScript parser that converts JavaScript code to a ``Program`` tree.

    esprima produces the ESTree nodes; ``_convert_<Type>`` methods map each
    node type onto its ``nodes`` dataclass. Node types without a converter
    are rejected with ``ParseError``.
    """

    OPTIONS = {
        'loc': True,
        'classProperties': True,
    }

    @staticmethod
    def parse(code: str) -> n.Program:
        """
        Parse JavaScript code to a Program tree.

        Args:
            code: JavaScript code to parse

        Returns:
            Program node

        Raises:
            ParseError: If parsing fails
        """
        try:
            # Try parseScript first
            ast = esprima.parseScript(code, options=JSParser.OPTIONS)
        except esprima.Error:
            try:
                # Fall back to parseModule for import/export statements
                ast = esprima.parseModule(code, options=JSParser.OPTIONS)
            except esprima.Error as e:
                raise JSParser._parse_error(e)
        return JSParser().convert(ast)

    @staticmethod
    def parse_expression(code: str) -> n.Node:
        """
        Parse a single JavaScript expression.

        Args:
            code: JavaScript expression to parse

        Returns:
            Expression node

        Raises:
            ParseError: If the code is not exactly one expression
        """
        # Wrap in parentheses to ensure it's parsed as expression; the newline
        # keeps a trailing line comment from swallowing the closing paren
        wrapped = f"({code}\n)"
        try:
            ast = esprima.parseScript(wrapped, options=JSParser.OPTIONS)
        except esprima.Error as e:
            raise JSParser._parse_error(e)

        body = ast.body
        if len(body) != 1 or body[0].type != 'ExpressionStatement':
            raise ParseError("Expected a single expression", 1, 0)
        return JSParser().convert(body[0].expression)

    @staticmethod
    def _parse_error(e: esprima.Error) -> ParseError:
        message = MESSAGE_PREFIX.sub("", e.message)
        # esprima columns are 1-based
        column = max((e.column or 1) - 1, 0)
        return ParseError(message, e.lineNumber or 0, column)

    # ============ Dispatch ============

    def convert(self, node: Any) -> Optional[n.Node]:
        """Convert one esprima node, keeping its start position."""
        if node is None:
            return None
        converter = getattr(self, f"_convert_{node.type}", None)
        if converter is None:
            raise self._unsupported(node)
        result = converter(node)
        if node.loc is not None:
            result.loc = (node.loc.start.line, node.loc.start.column)
        return result

    def convert_list(self, values: Optional[List[Any]]) -> List[Optional[n.Node]]:
        return [self.convert(value) for value in values or []]

    def _unsupported(self, node: Any) -> ParseError:
        line, column = 0, 0
        if node.loc is not None:
            line, column = node.loc.start.line, node.loc.start.column
        return ParseError(f"Unsupported syntax: {node.type}", line, column)

    # ============ Literals & identifiers ============

    def _convert_Identifier(self, node) -> n.Identifier:
        return n.Identifier(node.name)

    def _convert_Literal(self, node) -> n.Node:
        if node.regex is not None:
            return n.RegExpLiteral(node.regex.pattern, node.regex.flags or "")
        value = node.value
        if isinstance(value, bool):
            return n.BooleanLiteral(value)
        if value is None:
            return n.NullLiteral()
        if isinstance(value, str):
            return n.StringLiteral(value)
        return n.NumericLiteral(value, node.raw)

    def _convert_TemplateLiteral(self, node) -> n.TemplateLiteral:
        return n.TemplateLiteral(
            [quasi.value.raw for quasi in node.quasis],
            self.convert_list(node.expressions),
        )

    def _convert_TaggedTemplateExpression(self, node) -> n.TaggedTemplateExpression:
        return n.TaggedTemplateExpression(self.convert(node.tag), self.convert(node.quasi))

    def _convert_ThisExpression(self, node) -> n.ThisExpression:
        return n.ThisExpression()

    def _convert_Super(self, node) -> n.Super:
        return n.Super()

    def _convert_MetaProperty(self, node) -> n.MemberExpression:
        # new.target
        return n.MemberExpression(self.convert(node.meta), self.convert(node.property))

    def _convert_Import(self, node) -> n.Identifier:
        # callee of a dynamic import()
        return n.Identifier("import")

    # ============ Objects & arrays ============

    def _convert_ArrayExpression(self, node) -> n.ArrayExpression:
        return n.ArrayExpression(self.convert_list(node.elements))

    def _convert_ObjectExpression(self, node) -> n.ObjectExpression:
        return n.ObjectExpression(self.convert_list(node.properties))

    def _convert_Property(self, node) -> n.Node:
        key = self.convert(node.key)
        if node.method or node.kind in ('get', 'set'):
            function = node.value
            return n.ObjectMethod(
                'method' if node.kind == 'init' else node.kind,
                key,
                self.convert_list(function.params),
                self.convert(function.body),
                computed=bool(node.computed),
                is_async=bool(function.isAsync),
                generator=bool(function.generator),
            )
        return n.ObjectProperty(
            key,
            self.convert(node.value),
            computed=bool(node.computed),
            shorthand=bool(node.shorthand),
        )

    def _convert_SpreadElement(self, node) -> n.SpreadElement:
        return n.SpreadElement(self.convert(node.argument))

    # ============ Functions & classes ============

    def _convert_FunctionExpression(self, node) -> n.FunctionExpression:
        return n.FunctionExpression(
            self.convert(node.id),
            self.convert_list(node.params),
            self.convert(node.body),
            is_async=bool(node.isAsync),
            generator=bool(node.generator),
        )

    def _convert_FunctionDeclaration(self, node) -> n.FunctionDeclaration:
        return n.FunctionDeclaration(
            self.convert(node.id),
            self.convert_list(node.params),
            self.convert(node.body),
            is_async=bool(node.isAsync),
            generator=bool(node.generator),
        )

    def _convert_ArrowFunctionExpression(self, node) -> n.ArrowFunctionExpression:
        return n.ArrowFunctionExpression(
            self.convert_list(node.params),
            self.convert(node.body),
            is_async=bool(node.isAsync),
        )

    def _convert_ClassDeclaration(self, node) -> n.ClassDeclaration:
        return n.ClassDeclaration(
            self.convert(node.id),
            self.convert(node.superClass),
            self.convert_list(node.body.body),
        )

    def _convert_ClassExpression(self, node) -> n.ClassExpression:
        return n.ClassExpression(
            self.convert(node.id),
            self.convert(node.superClass),
            self.convert_list(node.body.body),
        )

    def _convert_MethodDefinition(self, node) -> n.ClassMethod:
        function = node.value
        return n.ClassMethod(
            node.kind,
            self.convert(node.key),
            self.convert_list(function.params),
            self.convert(function.body),
            computed=bool(node.computed),
            static=bool(node.static),
            is_async=bool(function.isAsync),
            generator=bool(function.generator),
        )

    def _convert_FieldDefinition(self, node) -> n.ClassProperty:
        return n.ClassProperty(
            self.convert(node.key),
            self.convert(node.value),
            computed=bool(node.computed),
            static=bool(node.static),
        )

    # ============ Operators ============

    def _convert_UnaryExpression(self, node) -> n.UnaryExpression:
        return n.UnaryExpression(node.operator, self.convert(node.argument))

    def _convert_UpdateExpression(self, node) -> n.UpdateExpression:
        return n.UpdateExpression(node.operator, self.convert(node.argument), bool(node.prefix))

    def _convert_BinaryExpression(self, node) -> n.BinaryExpression:
        return n.BinaryExpression(node.operator, self.convert(node.left), self.convert(node.right))

    def _convert_LogicalExpression(self, node) -> n.LogicalExpression:
        return n.LogicalExpression(node.operator, self.convert(node.left), self.convert(node.right))

    def _convert_AssignmentExpression(self, node) -> n.AssignmentExpression:
        return n.AssignmentExpression(node.operator, self.convert(node.left), self.convert(node.right))

    def _convert_ConditionalExpression(self, node) -> n.ConditionalExpression:
        return n.ConditionalExpression(
            self.convert(node.test),
            self.convert(node.consequent),
            self.convert(node.alternate),
        )

    def _convert_CallExpression(self, node) -> n.CallExpression:
        return n.CallExpression(self.convert(node.callee), self.convert_list(node.arguments))

    def _convert_NewExpression(self, node) -> n.NewExpression:
        return n.NewExpression(self.convert(node.callee), self.convert_list(node.arguments))

    def _convert_MemberExpression(self, node) -> n.MemberExpression:
        return n.MemberExpression(
            self.convert(node.object),
            self.convert(node.property),
            computed=bool(node.computed),
        )

    def _convert_SequenceExpression(self, node) -> n.SequenceExpression:
        return n.SequenceExpression(self.convert_list(node.expressions))

    def _convert_AwaitExpression(self, node) -> n.AwaitExpression:
        return n.AwaitExpression(self.convert(node.argument))

    def _convert_YieldExpression(self, node) -> n.YieldExpression:
        return n.YieldExpression(self.convert(node.argument), bool(node.delegate))

    # ============ Patterns ============

    def _convert_ObjectPattern(self, node) -> n.ObjectPattern:
        return n.ObjectPattern(self.convert_list(node.properties))

    def _convert_ArrayPattern(self, node) -> n.ArrayPattern:
        return n.ArrayPattern(self.convert_list(node.elements))

    def _convert_AssignmentPattern(self, node) -> n.AssignmentPattern:
        return n.AssignmentPattern(self.convert(node.left), self.convert(node.right))

    def _convert_RestElement(self, node) -> n.RestElement:
        return n.RestElement(self.convert(node.argument))

    # ============ Statements ============

    def _convert_Program(self, node) -> n.Program:
        return n.Program(self.convert_list(node.body))

    def _convert_ExpressionStatement(self, node) -> n.ExpressionStatement:
        return n.ExpressionStatement(self.convert(node.expression))

    def _convert_BlockStatement(self, node) -> n.BlockStatement:
        return n.BlockStatement(self.convert_list(node.body))

    def _convert_EmptyStatement(self, node) -> n.EmptyStatement:
        return n.EmptyStatement()

    def _convert_DebuggerStatement(self, node) -> n.DebuggerStatement:
        return n.DebuggerStatement()

    def _convert_VariableDeclaration(self, node) -> n.VariableDeclaration:
        return n.VariableDeclaration(node.kind, self.convert_list(node.declarations))

    def _convert_VariableDeclarator(self, node) -> n.VariableDeclarator:
        return n.VariableDeclarator(self.convert(node.id), self.convert(node.init))

    def _convert_ReturnStatement(self, node) -> n.ReturnStatement:
        return n.ReturnStatement(self.convert(node.argument))

    def _convert_IfStatement(self, node) -> n.IfStatement:
        return n.IfStatement(
            self.convert(node.test),
            self.convert(node.consequent),
            self.convert(node.alternate),
        )

    def _convert_ForStatement(self, node) -> n.ForStatement:
        return n.ForStatement(
            self.convert(node.init),
            self.convert(node.test),
            self.convert(node.update),
            self.convert(node.body),
        )

    def _convert_ForInStatement(self, node) -> n.ForInStatement:
        return n.ForInStatement(self.convert(node.left), self.convert(node.right), self.convert(node.body))

    def _convert_ForOfStatement(self, node) -> n.ForOfStatement:
        return n.ForOfStatement(self.convert(node.left), self.convert(node.right), self.convert(node.body))

    def _convert_WhileStatement(self, node) -> n.WhileStatement:
        return n.WhileStatement(self.convert(node.test), self.convert(node.body))

    def _convert_DoWhileStatement(self, node) -> n.DoWhileStatement:
        return n.DoWhileStatement(self.convert(node.body), self.convert(node.test))

    def _convert_BreakStatement(self, node) -> n.BreakStatement:
        return n.BreakStatement(self.convert(node.label))

    def _convert_ContinueStatement(self, node) -> n.ContinueStatement:
        return n.ContinueStatement(self.convert(node.label))

    def _convert_ThrowStatement(self, node) -> n.ThrowStatement:
        return n.ThrowStatement(self.convert(node.argument))

    def _convert_TryStatement(self, node) -> n.TryStatement:
        return n.TryStatement(
            self.convert(node.block),
            self.convert(node.handler),
            self.convert(node.finalizer),
        )

    def _convert_CatchClause(self, node) -> n.CatchClause:
        return n.CatchClause(self.convert(node.param), self.convert(node.body))

    def _convert_SwitchStatement(self, node) -> n.SwitchStatement:
        return n.SwitchStatement(self.convert(node.discriminant), self.convert_list(node.cases))

    def _convert_SwitchCase(self, node) -> n.SwitchCase:
        return n.SwitchCase(self.convert(node.test), self.convert_list(node.consequent))

    def _convert_LabeledStatement(self, node) -> n.LabeledStatement:
        return n.LabeledStatement(self.convert(node.label), self.convert(node.body))

    # ============ Modules ============

    def _convert_ImportDeclaration(self, node) -> n.ImportDeclaration:
        return n.ImportDeclaration(self.convert_list(node.specifiers), self.convert(node.source))

    def _convert_ImportSpecifier(self, node) -> n.ImportSpecifier:
        return n.ImportSpecifier(self.convert(node.imported), self.convert(node.local))

    def _convert_ImportDefaultSpecifier(self, node) -> n.ImportDefaultSpecifier:
        return n.ImportDefaultSpecifier(self.convert(node.local))

    def _convert_ImportNamespaceSpecifier(self, node) -> n.ImportNamespaceSpecifier:
        return n.ImportNamespaceSpecifier(self.convert(node.local))

    def _convert_ExportSpecifier(self, node) -> n.ExportSpecifier:
        return n.ExportSpecifier(self.convert(node.local), self.convert(node.exported))

    def _convert_ExportNamedDeclaration(self, node) -> n.ExportNamedDeclaration:
        return n.ExportNamedDeclaration(
            self.convert(node.declaration),
            self.convert_list(node.specifiers),
            self.convert(node.source),
        )

    def _convert_ExportDefaultDeclaration(self, node) -> n.ExportDefaultDeclaration:
        return n.ExportDefaultDeclaration(self.convert(node.declaration))

    def _convert_ExportAllDeclaration(self, node) -> n.ExportAllDeclaration:
        return n.ExportAllDeclaration(self.convert(node.source))


def parse(code: str) -> n.Program:
    """Parse JavaScript source into a ``Program`` tree."""
    return JSParser.parse(code)


def parse_expression(code: str) -> n.Node:
    """Parse a single JavaScript expression."""
    return JSParser.parse_expression(code)
