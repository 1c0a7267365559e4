"""Converter facade tests."""

import logging

import pytest

from app.services.taroize import (
    ConversionError,
    DirectiveValueError,
    NestingTooDeepError,
    ParseError,
    StructuralUnsupportedError,
    code_frame,
    convert_page,
    convert_wxml,
)
from app.services.taroize import nodes as n
from app.services.taroize.converter import parse_page_config, resolve_options


PAGE_WXML = """<view class="container">
  <text wx:if="{{loading}}">Loading</text>
  <view wx:else wx:for="{{items}}" wx:key="id" bindtap="handleTap">{{item.title}}</view>
</view>"""

PAGE_SCRIPT = """const app = getApp()

Page({
  data: {
    loading: true,
    items: []
  },
  onLoad(options) {
    wx.showLoading({ title: 'Loading' })
  },
  handleTap(e) {
    wx.navigateTo({ url: '/pages/detail/detail' })
  }
})
"""


def test_convert_page(converter):
    """Test a complete page conversion."""
    result = converter.convert(PAGE_WXML, PAGE_SCRIPT, '{"navigationBarTitleText": "List"}')

    assert result["kind"] == "Page"
    assert result["components"] == ["Block", "View", "Text"]
    assert result["stateKeys"] == ["loading", "items"]

    code = result["code"]
    assert code.startswith(
        "import { Block, View, Text } from '@tarojs/components';\n"
        "import Taro from '@tarojs/taro';\n"
        "import withWeapp from '@tarojs/with-weapp';\n"
        "const app = Taro.getApp();\n"
        "@withWeapp('Page')\n"
        "export default class _C extends Taro.Component {\n"
    )
    assert "  componentWillMount(options) {\n    Taro.showLoading({" in code
    assert "  handleTap = e => {\n    Taro.navigateTo({" in code
    assert "  config = {\n    navigationBarTitleText: 'List'\n  };" in code
    assert "    const { loading, items } = this.state;" in code
    assert "{loading ? <Text>Loading</Text> : items((item, index) => {" in code
    assert 'return <View key="id" onTap="handleTap">' in code
    assert code.endswith("  }\n}\n")


def test_convert_without_template(converter):
    """Test a script-only conversion."""
    result = converter.convert(script="Component({ data: { a: 1 } })")
    assert result["components"] == []
    assert result["kind"] == "Component"
    assert "return null;" in result["code"]


def test_convert_without_script(converter):
    """Test a template-only page."""
    result = converter.convert(wxml="<view/>")
    assert result["kind"] == "Page"
    assert result["stateKeys"] == []
    assert "return <Block>\n      <View />\n    </Block>;" in result["code"]


def test_convert_without_registration(converter, caplog):
    """Test a script with no registration call."""
    with caplog.at_level(logging.WARNING):
        result = converter.convert(script="module.exports = {}")
    assert result["kind"] is None
    assert "No Page/Component/App registration" in caplog.text


def test_options_override_settings(converter):
    """Test per-call options."""
    result = converter.convert(
        wxml='<view wx:for="{{list}}" wx:key="id"/>',
        script="Page({})",
        options={"className": "Index", "keyAttribute": "taroKey", "targetNamespace": "Tt"},
    )
    code = result["code"]
    assert "export default class Index extends Tt.Component {" in code
    assert 'taroKey="id"' in code


def test_resolve_options_defaults():
    """Test that missing options come from the settings."""
    assert resolve_options(None) == {
        "legacyNamespace": "wx",
        "targetNamespace": "Taro",
        "className": "_C",
        "keyAttribute": "key",
    }
    assert resolve_options({"className": "Home"})["className"] == "Home"


def test_page_config_as_dict(converter):
    """Test page configuration given as an object."""
    result = converter.convert(script="Page({})", json={"enablePullDownRefresh": True})
    assert "enablePullDownRefresh: true" in result["code"]


def test_page_config_parsing():
    """Test the page configuration forms."""
    assert parse_page_config(None) is None
    assert parse_page_config("  ") is None
    assert isinstance(parse_page_config('{"a": [1, "b"]}'), n.ObjectExpression)


def test_page_config_invalid_json():
    """Test malformed page JSON."""
    with pytest.raises(ParseError) as exc:
        parse_page_config('{"a": }')
    assert exc.value.line == 1


def test_page_config_must_be_object():
    """Test page JSON that is not an object."""
    with pytest.raises(ConversionError):
        parse_page_config("[1, 2]")


def test_template_error_has_frame(converter):
    """Test code frames on template errors."""
    with pytest.raises(DirectiveValueError) as exc:
        converter.convert(wxml='<view>\n  <text wx:for="list"/>\n</view>')
    error = exc.value
    assert error.line == 2
    assert "> 2 |   <text wx:for=\"list\"/>" in str(error)


def test_script_error_has_frame(converter):
    """Test code frames on script errors."""
    with pytest.raises(StructuralUnsupportedError) as exc:
        converter.convert(script="Page({\n  ...base\n})")
    assert exc.value.frame is not None
    assert "> 2 |   ...base" in str(exc.value)


def test_script_syntax_error(converter):
    """Test a script that does not parse."""
    with pytest.raises(ParseError):
        converter.convert(script="Page({ data: { })")


def test_deeply_nested_script_raises_conversion_error(converter):
    """Test that nesting past the recursion limit is a conversion error."""
    script = "Page({ data: { a: " + "(" * 3000 + "1" + ")" * 3000 + " } })"
    with pytest.raises(NestingTooDeepError) as exc:
        converter.convert(script=script)
    assert isinstance(exc.value, ConversionError)
    assert exc.value.message == "Script nesting too deep"


def test_deeply_nested_template_raises_conversion_error(converter):
    """Test a template nested past the recursion limit."""
    wxml = "<view>" * 2000 + "x" + "</view>" * 2000
    with pytest.raises(NestingTooDeepError, match="Template nesting too deep"):
        converter.convert(wxml=wxml)
    with pytest.raises(NestingTooDeepError):
        converter.convert_wxml(wxml)


def test_deeply_nested_page_config_raises_conversion_error(converter):
    """Test a page configuration nested past the recursion limit."""
    config = {}
    for _ in range(3000):
        config = {"a": config}
    with pytest.raises(NestingTooDeepError, match="Page configuration nesting too deep"):
        converter.convert(json=config)


def test_convert_to_ast(converter):
    """Test the tree form of a conversion."""
    program = converter.convert_to_ast(wxml="<view/>", script="Page({})")
    assert isinstance(program, n.Program)
    assert isinstance(program.body[0], n.ImportDeclaration)


def test_convert_wxml_helper():
    """Test the template-only helper."""
    assert convert_wxml("<text>Hi</text>") == "<Block>\n  <Text>Hi</Text>\n</Block>"


def test_convert_wxml_key_option():
    """Test the key attribute option for templates."""
    output = convert_wxml('<view wx:for="{{l}}" wx:key="id"/>', {"keyAttribute": "k"})
    assert 'k="id"' in output


def test_convert_page_helper():
    """Test the module-level helper."""
    result = convert_page(script="App({})")
    assert result["kind"] == "App"


def test_conversions_are_independent(converter):
    """Test that used components do not leak between calls."""
    first = converter.convert(wxml="<image/>")
    second = converter.convert(wxml="<text/>")
    assert first["components"] == ["Block", "Image"]
    assert second["components"] == ["Block", "Text"]


def test_code_frame():
    """Test code frame rendering."""
    frame = code_frame("a\nbb\nccc\nd\ne\nf", 3, 1)
    assert frame == (
        "  1 | a\n"
        "  2 | bb\n"
        "> 3 | ccc\n"
        "    |  ^\n"
        "  4 | d\n"
        "  5 | e"
    )


def test_code_frame_out_of_range():
    """Test a location outside the source."""
    assert code_frame("a", 5, 0) == ""
