"""Script parser tests."""

import pytest

from app.services.taroize import nodes as n
from app.services.taroize.errors import ParseError
from app.services.taroize.parser import parse, parse_expression


def test_parse_expression_precedence():
    """Test that multiplication binds tighter than addition."""
    expression = parse_expression("a + b * c")
    assert expression == n.BinaryExpression(
        "+",
        n.Identifier("a"),
        n.BinaryExpression("*", n.Identifier("b"), n.Identifier("c")),
    )


def test_parse_expression_logical():
    """Test logical operators produce LogicalExpression."""
    expression = parse_expression("a && b || c")
    assert isinstance(expression, n.LogicalExpression)
    assert expression.operator == "||"
    assert expression.left == n.LogicalExpression("&&", n.Identifier("a"), n.Identifier("b"))


def test_parse_expression_exponent_is_right_associative():
    """Test that ** groups to the right."""
    expression = parse_expression("a ** b ** c")
    assert expression.left == n.Identifier("a")
    assert isinstance(expression.right, n.BinaryExpression)


def test_parse_expression_parenthesized_concatenation():
    """Test the concatenation shape produced for interpolated text."""
    expression = parse_expression('"Hi "+(name)')
    assert expression == n.BinaryExpression("+", n.StringLiteral("Hi "), n.Identifier("name"))


def test_parse_expression_literals():
    """Test that each literal kind maps to its own node."""
    array = parse_expression("[1, 'a', true, null, /ab+c/g, 0x1F]")
    number, string, boolean, null, regex, hex_number = array.elements
    assert number == n.NumericLiteral(1, "1")
    assert string == n.StringLiteral("a")
    assert boolean == n.BooleanLiteral(True)
    assert null == n.NullLiteral()
    assert regex == n.RegExpLiteral("ab+c", "g")
    assert hex_number.raw == "0x1F"


def test_parse_expression_rejects_trailing_tokens():
    """Test that a fragment must be a single expression."""
    with pytest.raises(ParseError):
        parse_expression("a b")


def test_parse_expression_with_line_comment():
    """Test that a trailing comment does not hide the end of the fragment."""
    assert parse_expression("a // note") == n.Identifier("a")


def test_parse_arrow_functions():
    """Test arrow functions with and without parentheses."""
    single = parse_expression("x => x + 1")
    assert isinstance(single, n.ArrowFunctionExpression)
    assert single.params == [n.Identifier("x")]

    multiple = parse_expression("(a, { b }) => { return a; }")
    assert isinstance(multiple, n.ArrowFunctionExpression)
    assert isinstance(multiple.params[1], n.ObjectPattern)
    assert isinstance(multiple.body, n.BlockStatement)


def test_parse_parenthesized_expression_is_not_arrow():
    """Test that a parenthesized sequence stays an expression."""
    expression = parse_expression("(a, b)")
    assert isinstance(expression, n.SequenceExpression)


def test_parse_page_registration():
    """Test parsing a Page registration call."""
    program = parse("Page({ data: { n: 1 }, onShow() { this.setData({ n: 2 }) } })")
    assert len(program.body) == 1
    call = program.body[0].expression
    assert isinstance(call, n.CallExpression)
    assert call.callee == n.Identifier("Page")

    config = call.arguments[0]
    assert isinstance(config, n.ObjectExpression)
    data, on_show = config.properties
    assert isinstance(data, n.ObjectProperty)
    assert data.key == n.Identifier("data")
    assert isinstance(on_show, n.ObjectMethod)
    assert on_show.kind == "method"


def test_parse_object_members():
    """Test shorthand, getter, computed and spread members."""
    obj = parse_expression("{ a, get b() { return 1; }, [c]: 2, ...d }")
    a, b, c, d = obj.properties
    assert a.shorthand is True
    assert isinstance(b, n.ObjectMethod) and b.kind == "get"
    assert c.computed is True
    assert isinstance(d, n.SpreadElement)


def test_parse_async_object_method():
    """Test an async method inside a registration object."""
    obj = parse_expression("{ async onShow() { await wx.login() } }")
    method = obj.properties[0]
    assert isinstance(method, n.ObjectMethod)
    assert method.is_async is True
    assert isinstance(method.body.body[0].expression, n.AwaitExpression)


def test_parse_destructuring_declaration():
    """Test object and array patterns in declarations."""
    program = parse("const { a, b: c, ...rest } = obj; let [x, , y = 2] = list;")
    object_decl, array_decl = program.body
    pattern = object_decl.declarations[0].id
    assert isinstance(pattern, n.ObjectPattern)
    assert isinstance(pattern.properties[2], n.RestElement)

    array_pattern = array_decl.declarations[0].id
    assert isinstance(array_pattern, n.ArrayPattern)
    assert array_pattern.elements[1] is None
    assert isinstance(array_pattern.elements[2], n.AssignmentPattern)


def test_parse_automatic_semicolon_insertion():
    """Test statements separated only by newlines."""
    program = parse("a = 1\nb = 2\nreturnValue()")
    assert len(program.body) == 3
    assert all(isinstance(statement, n.ExpressionStatement) for statement in program.body)


def test_parse_return_with_newline():
    """Test that a newline after return ends the statement."""
    program = parse("function f() {\n  return\n  value\n}")
    body = program.body[0].body.body
    assert body[0] == n.ReturnStatement(None)
    assert isinstance(body[1], n.ExpressionStatement)


def test_parse_control_flow_statements():
    """Test the statement kinds used by page scripts."""
    program = parse(
        "for (let i = 0; i < n; i++) {}\n"
        "for (const k in obj) {}\n"
        "for (const v of list) {}\n"
        "while (x) x--\n"
        "do { y++ } while (y < 3)\n"
        "switch (k) { case 1: break; default: go() }\n"
        "try { run() } catch (e) { report(e) } finally { done() }\n"
        "outer: for (;;) { break outer }\n"
    )
    assert [type(statement).__name__ for statement in program.body] == [
        "ForStatement",
        "ForInStatement",
        "ForOfStatement",
        "WhileStatement",
        "DoWhileStatement",
        "SwitchStatement",
        "TryStatement",
        "LabeledStatement",
    ]


def test_parse_class_declaration():
    """Test class fields, accessors and methods."""
    program = parse(
        "class A extends Taro.Component {\n"
        "  static x = 1;\n"
        "  state = {};\n"
        "  get y() { return this.x }\n"
        "  render() { return null }\n"
        "}"
    )
    declaration = program.body[0]
    assert isinstance(declaration, n.ClassDeclaration)
    assert isinstance(declaration.superclass, n.MemberExpression)
    static_x, state, getter, render = declaration.body
    assert isinstance(static_x, n.ClassProperty) and static_x.static is True
    assert isinstance(state, n.ClassProperty)
    assert isinstance(getter, n.ClassMethod) and getter.kind == "get"
    assert isinstance(render, n.ClassMethod) and render.kind == "method"


def test_parse_modules():
    """Test import and export declarations."""
    program = parse(
        "import Taro, { useState as us } from '@tarojs/taro'\n"
        "import * as util from './util'\n"
        "export const a = 1\n"
        "export default function () {}\n"
    )
    first, second, third, fourth = program.body
    assert isinstance(first.specifiers[0], n.ImportDefaultSpecifier)
    assert first.specifiers[1].imported.name == "useState"
    assert first.specifiers[1].local.name == "us"
    assert isinstance(second.specifiers[0], n.ImportNamespaceSpecifier)
    assert isinstance(third, n.ExportNamedDeclaration)
    assert isinstance(fourth, n.ExportDefaultDeclaration)


def test_parse_template_literal():
    """Test template literal quasis and expressions."""
    expression = parse_expression("`a${b}c${d + 1}`")
    assert isinstance(expression, n.TemplateLiteral)
    assert expression.quasis == ["a", "c", ""]
    assert expression.expressions[0] == n.Identifier("b")


def test_parse_async_and_generators():
    """Test async functions, await and generators."""
    program = parse("async function load() { await fetch(url) }\nfunction* gen() { yield 1 }")
    load, gen = program.body
    assert load.is_async is True
    assert isinstance(load.body.body[0].expression, n.AwaitExpression)
    assert gen.generator is True
    assert isinstance(gen.body.body[0].expression, n.YieldExpression)


def test_parse_error_reports_location():
    """Test that syntax errors carry line and column."""
    with pytest.raises(ParseError) as exc:
        parse("Page({\n  data: {\n})")
    assert exc.value.line == 3
    assert str(exc.value).startswith("Parse error at line 3")
    assert "Unexpected token" in exc.value.message


def test_optional_chaining_is_rejected():
    """Test that syntax esprima does not know fails as a ParseError."""
    with pytest.raises(ParseError):
        parse("const v = res?.data")


def test_unsupported_statement_raises():
    """Test an ESTree node type without a counterpart."""
    with pytest.raises(ParseError) as exc:
        parse("with (obj) { a() }")
    assert "Unsupported syntax: WithStatement" in exc.value.message
    assert exc.value.line == 1


def test_parse_records_locations():
    """Test that nodes keep the position of their first token."""
    program = parse("\n\n  Page({})")
    assert program.body[0].loc == (3, 2)
