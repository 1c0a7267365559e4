"""
WeChat Mini-Program to Taro Converter

Converts a mini-program page - a WXML template plus a Page/Component/App
registration script - into a Taro class component whose render method
returns the template as JSX.

- TaroizeConverter: Converts a whole page to a Taro module
- parse_wxml: Converts a WXML template to a JSX tree
- ScriptTransformer: Converts a registration script to a class component
"""

from .converter import TaroizeConverter, convert_page, convert_wxml
from .errors import (
    ConversionError,
    ParseError,
    StructuralUnsupportedError,
    InvalidKeyError,
    DirectiveValueError,
    NestingTooDeepError,
    code_frame,
)
from .generator import CodeGenerator, generate
from .parser import parse, parse_expression
from .script import ScriptTransformer, parse_script
from .types import ConversionOptions, ConvertedResult
from .wxml import parse_wxml, parse_content, handle_attr_key

__all__ = [
    "TaroizeConverter",
    "convert_page",
    "convert_wxml",
    "ConversionError",
    "ParseError",
    "StructuralUnsupportedError",
    "InvalidKeyError",
    "DirectiveValueError",
    "NestingTooDeepError",
    "code_frame",
    "CodeGenerator",
    "generate",
    "parse",
    "parse_expression",
    "ScriptTransformer",
    "parse_script",
    "ConversionOptions",
    "ConvertedResult",
    "parse_wxml",
    "parse_content",
    "handle_attr_key",
]

__version__ = "1.0.0"
