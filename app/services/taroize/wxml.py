"""
WXML template to JSX conversion.

The markup tree is first built into a JSX tree with every attribute and
interpolation converted, then ``ControlFlowRewriter`` replaces the
``wx:if``/``wx:elif``/``wx:else`` chains and ``wx:for`` loops with the
equivalent expressions.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import nodes as n
from .errors import DirectiveValueError, ParseError
from .lifecycle import KNOWN_COMPONENTS
from .markup import Comment, Element, MarkupNode, Text, parse_markup
from .parser import parse_expression
from .utils import camel_case, is_identifier, pascal_case

logger = logging.getLogger(__name__)


WX_IF = "wx:if"
WX_ELIF = "wx:elif"
WX_ELSE = "wx:else"
WX_FOR = "wx:for"
WX_FOR_ITEM = "wx:for-item"
WX_FOR_INDEX = "wx:for-index"
WX_KEY = "wx:key"

INTERPOLATION = re.compile(r"\{\{(.+?)\}\}", re.DOTALL)


@dataclass
class ParsedContent:
    """Result of scanning a text or attribute value for ``{{ }}`` spans."""
    type: str  # "raw" | "expression"
    content: str


@dataclass
class Condition:
    """One member of a wx:if / wx:elif / wx:else chain."""
    directive: str
    tester: Optional[n.Node]
    target: n.Node


@dataclass
class WxmlResult:
    ast: n.JSXElement
    used_components: List[str] = field(default_factory=list)


def parse_content(content: str) -> ParsedContent:
    """
    Split ``content`` into literal text and ``{{ }}`` expressions.

    Literal chunks become JSON string literals and each expression is
    parenthesized; the pieces are joined with ``+``. Content without any
    ``{{ }}`` span is returned unchanged as ``raw``.

    Args:
        content: Text node content or attribute value

    Returns:
        ParsedContent with the raw text or the concatenation source
    """
    if not INTERPOLATION.search(content):
        return ParsedContent("raw", content)

    tokens: List[str] = []
    last_index = 0
    for match in INTERPOLATION.finditer(content):
        if match.start() > last_index:
            tokens.append(json.dumps(content[last_index:match.start()], ensure_ascii=False))
        tokens.append(f"({match.group(1).strip()})")
        last_index = match.end()
    if last_index < len(content):
        tokens.append(json.dumps(content[last_index:], ensure_ascii=False))
    return ParsedContent("expression", "+".join(tokens))


def handle_attr_key(key: str) -> str:
    """
    Normalize a WXML attribute name to its JSX prop name.

    Directive names (``wx:``/``wx-``) are left alone. Everything else is
    camel-cased, ``class`` becomes ``className`` and ``bind``/``catch``
    event prefixes become ``on`` followed by an uppercase letter.
    """
    if key.startswith("wx:") or key.startswith("wx-"):
        return key

    jsx_key = camel_case(key)
    if jsx_key == "class":
        return "className"

    jsx_key = re.sub(r"^(bind|catch)", "on", jsx_key)
    if jsx_key.startswith("on") and len(jsx_key) > 2:
        jsx_key = jsx_key[:2] + jsx_key[2].upper() + jsx_key[3:]
    return jsx_key


def is_empty_text(node: MarkupNode) -> bool:
    return isinstance(node, Text) and not node.content.strip()


def filter_nodes(nodes: List[MarkupNode]) -> List[MarkupNode]:
    """Drop comments and whitespace-only text."""
    return [node for node in nodes if not isinstance(node, Comment) and not is_empty_text(node)]


def _at(node: n.Node, loc: Optional[Tuple[int, int]]) -> n.Node:
    node.loc = loc
    return node


class TemplateBuilder:
    """
    Builds the JSX tree for a filtered markup tree.

    Component names are recorded in first-use order as elements are built;
    ``used_components`` only lists names the component library exports.
    """

    def __init__(self):
        self.used_components: List[str] = []

    def build(self, nodes: List[MarkupNode]) -> n.JSXElement:
        """Wrap the top-level nodes in a single ``Block`` element."""
        return self.build_element(Element("block", [], nodes, loc=(1, 0)))

    def build_node(self, node: MarkupNode) -> n.Node:
        if isinstance(node, Text):
            return self.build_text(node)
        return self.build_element(node)

    def build_element(self, element: Element) -> n.JSXElement:
        name = pascal_case(element.tag_name)
        if name in KNOWN_COMPONENTS and name not in self.used_components:
            self.used_components.append(name)
        attributes = [self.build_attribute(attr) for attr in element.attributes]
        children = [self.build_node(child) for child in filter_nodes(element.children)]
        return _at(n.JSXElement(name, attributes, children), element.loc)

    def build_text(self, text: Text) -> n.Node:
        parsed = parse_content(text.content)
        if parsed.type == "raw":
            return _at(n.JSXText(parsed.content), text.loc)
        expression = self._parse_interpolation(parsed.content, text.loc)
        return _at(n.JSXExpressionContainer(expression), text.loc)

    def build_attribute(self, attr) -> n.JSXAttribute:
        value = None
        if attr.value is not None:
            parsed = parse_content(attr.value)
            if parsed.type == "raw":
                value = _at(n.StringLiteral(parsed.content), attr.loc)
            else:
                expression = self._parse_interpolation(parsed.content, attr.loc)
                value = _at(n.JSXExpressionContainer(expression), attr.loc)
        return _at(n.JSXAttribute(handle_attr_key(attr.key), value), attr.loc)

    def _parse_interpolation(self, content: str, loc: Optional[Tuple[int, int]]) -> n.Node:
        try:
            return parse_expression(content)
        except ParseError as e:
            line, column = loc or (0, 0)
            raise ParseError(f"Invalid expression in {{{{ }}}}: {content}", line, column) from e


class ControlFlowRewriter(n.NodeTransformer):
    """
    Rewrites directive attributes into JSX expressions.

    Each element's children are scanned left to right. An element carrying
    ``wx:if`` starts a chain that extends over the immediately following
    siblings while they carry ``wx:elif`` or ``wx:else``; the whole chain is
    replaced by one expression container. An element carrying ``wx:for`` is
    replaced by a call of the loop collection with an ``(item, index)``
    callback returning the element.
    """

    def __init__(self, key_attribute: str = "key"):
        self.key_attribute = key_attribute

    def visit_JSXElement(self, node: n.JSXElement) -> n.JSXElement:
        return n.copy_node(node, children=self._rewrite_children(node.children))

    def _rewrite_children(self, children: List[n.Node]) -> List[n.Node]:
        result: List[n.Node] = []
        index = 0
        while index < len(children):
            child = children[index]
            if not isinstance(child, n.JSXElement):
                result.append(child)
                index += 1
                continue

            if _find(child, WX_IF) is not None and _find(child, WX_FOR) is None:
                chain, index = self._collect_chain(children, index)
                result.append(self._handle_conditions(chain))
                continue

            stray = _find(child, WX_ELIF) or _find(child, WX_ELSE)
            if stray is not None:
                logger.warning(f"{stray.name} on <{child.name}> does not follow a wx:if element")
            result.append(self._rewrite_element(child))
            index += 1
        return result

    def _rewrite_element(self, element: n.JSXElement) -> n.Node:
        element = self.visit(element)
        if _find(element, WX_FOR) is not None:
            return self._transform_loop(element)
        return element

    # ============ Conditions ============

    def _collect_chain(self, children: List[n.Node], start: int) -> Tuple[List[Condition], int]:
        """
        Collect the chain starting at ``children[start]``.

        Returns the chain and the index of the first sibling not in it.
        """
        first = children[start]
        attr = _find(first, WX_IF)
        chain = [Condition(WX_IF, self._tester(attr), self._chain_target(first, attr))]

        index = start + 1
        while index < len(children):
            sibling = children[index]
            if not isinstance(sibling, n.JSXElement):
                break
            attr = _chain_directive(sibling)
            if attr is None:
                break
            tester = self._tester(attr) if attr.name == WX_ELIF else None
            chain.append(Condition(attr.name, tester, self._chain_target(sibling, attr)))
            index += 1
            if attr.name == WX_ELSE:
                break

        logger.debug(f"Rewriting conditional chain of {len(chain)} element(s)")
        return chain, index

    def _chain_target(self, element: n.JSXElement, directive: n.JSXAttribute) -> n.Node:
        """The expression a chain member renders once its directive is removed."""
        element = n.copy_node(element, attributes=[a for a in element.attributes if a is not directive])
        target = self._rewrite_element(element)
        if isinstance(target, n.JSXExpressionContainer):
            return target.expression
        return target

    def _tester(self, attr: n.JSXAttribute) -> n.Node:
        if isinstance(attr.value, n.JSXExpressionContainer):
            return attr.value.expression
        if isinstance(attr.value, n.StringLiteral):
            return attr.value
        raise DirectiveValueError.at(attr, f"{attr.name} requires a condition value")

    def _handle_conditions(self, chain: List[Condition]) -> n.JSXExpressionContainer:
        first = chain[0]
        if len(chain) == 1:
            expression = n.LogicalExpression("&&", first.tester, first.target)
            return _at(n.JSXExpressionContainer(expression), first.target.loc)

        last = chain[-1]
        if last.directive == WX_ELSE:
            expression = last.target
        else:
            expression = n.LogicalExpression("&&", last.tester, last.target)
        for condition in reversed(chain[:-1]):
            expression = n.ConditionalExpression(condition.tester, condition.target, expression)
        return _at(n.JSXExpressionContainer(expression), first.target.loc)

    # ============ Loops ============

    def _transform_loop(self, element: n.JSXElement) -> n.JSXExpressionContainer:
        loop = _find(element, WX_FOR)
        if not isinstance(loop.value, n.JSXExpressionContainer):
            raise DirectiveValueError.at(loop, f'{WX_FOR} value must be wrapped in "{{{{}}}}"')

        item, index = "item", "index"
        condition = None
        attributes: List[n.JSXAttribute] = []
        for attr in element.attributes:
            if attr.name == WX_FOR:
                continue
            if attr.name in (WX_FOR_ITEM, WX_FOR_INDEX):
                name = self._binding_name(attr)
                if attr.name == WX_FOR_ITEM:
                    item = name
                else:
                    index = name
            elif attr.name == WX_KEY:
                attributes.append(n.copy_node(attr, name=self.key_attribute))
            elif attr.name == WX_IF:
                condition = self._tester(attr)
            else:
                attributes.append(attr)

        returned: n.Node = n.copy_node(element, attributes=attributes)
        if condition is not None:
            returned = n.LogicalExpression("&&", condition, returned)

        logger.debug(f"Rewriting wx:for on <{element.name}> as ({item}, {index})")
        callback = n.ArrowFunctionExpression(
            [n.Identifier(item), n.Identifier(index)],
            n.BlockStatement([n.ReturnStatement(returned)]),
        )
        call = n.CallExpression(loop.value.expression, [callback])
        return _at(n.JSXExpressionContainer(call), element.loc)

    def _binding_name(self, attr: n.JSXAttribute) -> str:
        if not isinstance(attr.value, n.StringLiteral):
            raise DirectiveValueError.at(attr, f"{attr.name} value must be a string")
        if not is_identifier(attr.value.value):
            raise DirectiveValueError.at(attr, f"{attr.name} value must be a valid identifier")
        return attr.value.value


def _find(element: n.JSXElement, name: str) -> Optional[n.JSXAttribute]:
    for attr in element.attributes:
        if attr.name == name:
            return attr
    return None


def _chain_directive(element: n.JSXElement) -> Optional[n.JSXAttribute]:
    """The ``wx:elif``/``wx:else`` attribute that continues a chain, if any."""
    for attr in element.attributes:
        if attr.name == WX_IF:
            return None
        if attr.name in (WX_ELIF, WX_ELSE):
            return attr
    return None


def parse_wxml(wxml: str, key_attribute: str = "key") -> WxmlResult:
    """
    Convert WXML source into a JSX tree rooted at a ``Block`` element.

    Args:
        wxml: WXML source text
        key_attribute: Attribute name ``wx:key`` is renamed to

    Returns:
        WxmlResult with the JSX tree and the component names it uses

    Raises:
        ParseError: If the markup or an interpolated expression is malformed
        DirectiveValueError: If a directive value has the wrong shape
    """
    builder = TemplateBuilder()
    tree = builder.build(filter_nodes(parse_markup(wxml)))
    tree = ControlFlowRewriter(key_attribute).visit(tree)
    return WxmlResult(tree, builder.used_components)
