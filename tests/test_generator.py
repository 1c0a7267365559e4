"""Code generator tests."""

import pytest

from app.services.taroize import nodes as n
from app.services.taroize.generator import generate, quote_string
from app.services.taroize.parser import parse
from app.services.taroize.utils import build_import_statement, to_literal


def reprint(source):
    return generate(parse(source))


@pytest.mark.parametrize("source", [
    "a = b + c * d;\n",
    "(a + b) * c;\n",
    "a - (b - c);\n",
    "x = a ? b : c ? d : e;\n",
    "f(x => x + 1);\n",
    "const { a, b: c, ...rest } = obj;\n",
    "const arr = [1, , 3];\n",
    "const re = /ab+c/gi;\n",
    "const s = `a${b}c`;\n",
    "import Taro, { useState as us } from '@tarojs/taro';\n",
    "for (let i = 0; i < n; i++) {\n  total += i;\n}\n",
    "if (a) {\n  b();\n} else {\n  c();\n}\n",
    "try {\n  run();\n} catch (e) {\n  report(e);\n} finally {\n  done();\n}\n",
    "switch (k) {\n  case 1:\n    a();\n    break;\n  default:\n    b();\n}\n",
    "do {\n  i--;\n} while (i > 0);\n",
    "async function load() {\n  const res = await fetch(url);\n  return res.data || null;\n}\n",
])
def test_reprint_canonical_source(source):
    """Test that canonical source prints back unchanged."""
    assert reprint(source) == source


def test_reprint_normalizes_quotes_and_semicolons():
    """Test that strings are single-quoted and statements terminated."""
    assert reprint('wx.showToast("done")') == "wx.showToast('done');\n"


def test_object_literal_statement_is_parenthesized():
    """Test that an object at statement start is wrapped."""
    assert reprint("({});") == "({});\n"


def test_double_negation_keeps_space():
    """Test that nested unary minus does not print as decrement."""
    assert reprint("-(-x);") == "- -x;\n"


def test_object_literal_is_multiline():
    """Test object literal layout."""
    assert reprint("x = { a: 1, b: [2] };") == "x = {\n  a: 1,\n  b: [2]\n};\n"


def test_quote_string_escapes():
    """Test escaping in single-quoted strings."""
    assert quote_string("it's") == "'it\\'s'"
    assert quote_string("a\nb") == "'a\\nb'"
    assert quote_string("back\\slash") == "'back\\\\slash'"


def test_import_statements():
    """Test the three import forms."""
    assert generate(build_import_statement("@tarojs/components", ["View", "Text"])) == \
        "import { View, Text } from '@tarojs/components';"
    assert generate(build_import_statement("@tarojs/taro", [], "Taro")) == \
        "import Taro from '@tarojs/taro';"
    assert generate(build_import_statement("./side-effect")) == "import './side-effect';"


def test_jsx_self_closing_element():
    """Test an element without children."""
    element = n.JSXElement("View", [n.JSXAttribute("className", n.StringLiteral("box"))])
    assert generate(element) == '<View className="box" />'


def test_jsx_boolean_attribute():
    """Test an attribute without a value."""
    element = n.JSXElement("Input", [n.JSXAttribute("disabled")])
    assert generate(element) == "<Input disabled />"


def test_jsx_inline_text_child():
    """Test that a single text child stays on one line."""
    element = n.JSXElement("Text", [], [n.JSXText("Hello")])
    assert generate(element) == "<Text>Hello</Text>"


def test_jsx_text_with_braces_is_quoted():
    """Test text that JSX would read as markup."""
    element = n.JSXElement("Text", [], [n.JSXText("a {b}")])
    assert generate(element) == "<Text>{'a {b}'}</Text>"


def test_jsx_children_on_own_lines():
    """Test element children layout."""
    element = n.JSXElement("View", [], [
        n.JSXElement("Text", [], [n.JSXText("A")]),
        n.JSXExpressionContainer(n.Identifier("b")),
    ])
    assert generate(element) == "<View>\n  <Text>A</Text>\n  {b}\n</View>"


def test_jsx_expression_attribute():
    """Test an attribute holding an expression."""
    attribute = n.JSXAttribute(
        "onTap",
        n.JSXExpressionContainer(n.MemberExpression(n.ThisExpression(), n.Identifier("handleTap"))),
    )
    assert generate(attribute) == "onTap={this.handleTap}"


def test_conditional_inside_logical_is_parenthesized():
    """Test precedence of generated conditional chains."""
    expression = n.LogicalExpression(
        "&&",
        n.Identifier("a"),
        n.ConditionalExpression(n.Identifier("b"), n.Identifier("c"), n.Identifier("d")),
    )
    assert generate(expression) == "a && (b ? c : d)"


def test_to_literal_prints_config_object():
    """Test JSON data printed as an object literal."""
    literal = to_literal({"navigationBarTitleText": "Home", "usingComponents": {}, "x-y": -1})
    assert generate(literal) == (
        "{\n"
        "  navigationBarTitleText: 'Home',\n"
        "  usingComponents: {},\n"
        "  'x-y': -1\n"
        "}"
    )


def test_unknown_node_raises():
    """Test that printing a foreign object fails loudly."""
    with pytest.raises(ValueError):
        generate(n.Node())


def test_nullish_mixed_with_logical_is_parenthesized():
    """Test that ?? next to || keeps its parentheses."""
    expression = n.LogicalExpression(
        "??",
        n.Identifier("a"),
        n.LogicalExpression("||", n.Identifier("b"), n.Identifier("c")),
    )
    assert generate(expression) == "a ?? (b || c)"


def test_optional_member_access():
    """Test printing an optional member chain."""
    expression = n.MemberExpression(n.Identifier("res"), n.Identifier("data"), optional=True)
    assert generate(expression) == "res?.data"
