"""
Helpers shared by the template and script transformers.
"""
import re
from typing import Any, List, Optional

from . import nodes as n


# Ascii word pattern used when a string has no case or digit boundaries
ASCII_WORD = re.compile(r"[^\x00-\x2f\x3a-\x40\x5b-\x60\x7b-\x7f]+")

# Strings that need the boundary-aware word split
HAS_BOUNDARY = re.compile(r"[a-z][A-Z]|[A-Z]{2}[a-z]|[0-9][a-zA-Z]|[a-zA-Z][0-9]|[^a-zA-Z0-9 ]")

BOUNDARY_WORD = re.compile(
    r"[A-Z]?[a-z]+(?=[^a-zA-Z0-9]|[A-Z]|$)"
    r"|[A-Z]+(?=[^a-zA-Z0-9]|[A-Z][a-z]|$)"
    r"|[A-Z]?[a-z]+"
    r"|[A-Z]+"
    r"|[0-9]+"
)

IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def split_words(value: str) -> List[str]:
    value = re.sub(r"['\u2019]", "", value)
    if HAS_BOUNDARY.search(value):
        return BOUNDARY_WORD.findall(value)
    return ASCII_WORD.findall(value)


def camel_case(value: str) -> str:
    """
    Camel-case ``value`` the way lodash's ``camelCase`` does.

    >>> camel_case("scroll-view")
    'scrollView'
    >>> camel_case("bindtap")
    'bindtap'
    """
    words = [word.lower() for word in split_words(value)]
    if not words:
        return ""
    return words[0] + "".join(word[:1].upper() + word[1:] for word in words[1:])


def pascal_case(value: str) -> str:
    """Uppercase the first character and camel-case the rest (``scroll-view`` -> ``ScrollView``)."""
    return value[:1].upper() + camel_case(value[1:])


def is_identifier(value: str) -> bool:
    return bool(IDENTIFIER.match(value))


def build_import_statement(
    source: str,
    specifiers: Optional[List[str]] = None,
    default: Optional[str] = None,
) -> n.ImportDeclaration:
    """
    Build ``import default, { a, b } from 'source'``.

    Args:
        source: Module name
        specifiers: Named imports
        default: Local name of the default import

    Returns:
        ImportDeclaration node
    """
    nodes: List[n.Node] = []
    if default:
        nodes.append(n.ImportDefaultSpecifier(n.Identifier(default)))
    for name in specifiers or []:
        nodes.append(n.ImportSpecifier(n.Identifier(name), n.Identifier(name)))
    return n.ImportDeclaration(nodes, n.StringLiteral(source))


def to_literal(value: Any) -> n.Node:
    """Convert decoded JSON into the equivalent object/array literal tree."""
    if value is None:
        return n.NullLiteral()
    if isinstance(value, bool):
        return n.BooleanLiteral(value)
    if isinstance(value, (int, float)):
        if value < 0:
            return n.UnaryExpression("-", n.NumericLiteral(-value))
        return n.NumericLiteral(value)
    if isinstance(value, str):
        return n.StringLiteral(value)
    if isinstance(value, (list, tuple)):
        return n.ArrayExpression([to_literal(item) for item in value])
    if isinstance(value, dict):
        properties = []
        for key, item in value.items():
            key = str(key)
            key_node = n.Identifier(key) if is_identifier(key) else n.StringLiteral(key)
            properties.append(n.ObjectProperty(key_node, to_literal(item)))
        return n.ObjectExpression(properties)
    raise TypeError(f"Cannot convert {type(value).__name__} to a literal")
