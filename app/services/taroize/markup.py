"""
WXML markup parser.

Produces a plain ``Element``/``Text``/``Comment`` tree. Tag names and
attribute keys keep their source casing because the template builder
derives component and prop names from them. Text may contain ``<`` and
``>`` inside ``{{ }}`` interpolation spans.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .errors import ParseError

logger = logging.getLogger(__name__)


VOID_TAGS = frozenset([
    "!doctype", "area", "base", "br", "col", "command", "embed", "hr", "img",
    "input", "keygen", "link", "meta", "param", "source", "track", "wbr",
])

# Elements whose content is kept verbatim as a single text child
RAW_TEXT_TAGS = frozenset(["wxs", "script", "style"])

PATTERNS = {
    "start_tag": re.compile(r"<([A-Za-z][^\s/>]*)"),
    "end_tag": re.compile(r"</\s*([^\s>]+)\s*>"),
    "attr_name": re.compile(r"[^\s=/>\"']+"),
    "attr_unquoted": re.compile(r"[^\s>]+"),
    "whitespace": re.compile(r"\s*"),
    "tag_like": re.compile(r"<(?:[A-Za-z/]|!--)"),
}


@dataclass
class Attribute:
    key: str
    value: Optional[str] = None
    loc: Optional[Tuple[int, int]] = None


@dataclass
class Text:
    content: str
    loc: Optional[Tuple[int, int]] = None


@dataclass
class Comment:
    content: str
    loc: Optional[Tuple[int, int]] = None


@dataclass
class Element:
    tag_name: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List["MarkupNode"] = field(default_factory=list)
    loc: Optional[Tuple[int, int]] = None


MarkupNode = Union[Element, Text, Comment]


class MarkupParser:
    """
    Single-pass parser for WXML.

    End tags close the nearest open element with the same name; an end tag
    with no matching open element is ignored, and anything still open when
    the input runs out is closed implicitly.
    """

    def __init__(self, source: str):
        self.source = source
        self.length = len(source)
        self.pos = 0

    def parse(self) -> List[MarkupNode]:
        root: List[MarkupNode] = []
        stack: List[Element] = []

        while self.pos < self.length:
            siblings = stack[-1].children if stack else root
            src = self.source

            if src.startswith("<!--", self.pos):
                siblings.append(self._parse_comment())
                continue

            if src.startswith("</", self.pos):
                self._close(stack)
                continue

            match = PATTERNS["start_tag"].match(src, self.pos)
            if match:
                element, is_open = self._parse_start_tag(match)
                siblings.append(element)
                if is_open:
                    stack.append(element)
                continue

            siblings.append(self._parse_text())

        if stack:
            logger.debug(f"Closing {len(stack)} unclosed element(s) at end of input")
        return root

    # ============ Helpers ============

    def _location(self, index: int) -> Tuple[int, int]:
        line = self.source.count("\n", 0, index) + 1
        column = index - (self.source.rfind("\n", 0, index) + 1)
        return line, column

    def _error(self, message: str, index: int) -> ParseError:
        line, column = self._location(index)
        return ParseError(message, line, column)

    def _skip_whitespace(self):
        self.pos = PATTERNS["whitespace"].match(self.source, self.pos).end()

    # ============ Nodes ============

    def _parse_comment(self) -> Comment:
        start = self.pos
        end = self.source.find("-->", start + 4)
        if end == -1:
            raise self._error("Unterminated comment", start)
        self.pos = end + 3
        return Comment(self.source[start + 4:end], self._location(start))

    def _close(self, stack: List[Element]):
        start = self.pos
        match = PATTERNS["end_tag"].match(self.source, start)
        if not match:
            raise self._error("Malformed end tag", start)
        self.pos = match.end()
        name = match.group(1).lower()
        for depth in range(len(stack) - 1, -1, -1):
            if stack[depth].tag_name.lower() == name:
                del stack[depth:]
                return
        logger.debug(f"Ignoring stray end tag </{match.group(1)}>")

    def _parse_start_tag(self, match) -> Tuple[Element, bool]:
        start = self.pos
        tag_name = match.group(1)
        self.pos = match.end()
        element = Element(tag_name, loc=self._location(start))
        self_closing = False

        while True:
            self._skip_whitespace()
            if self.pos >= self.length:
                raise self._error(f"Unterminated start tag <{tag_name}>", start)
            if self.source.startswith("/>", self.pos):
                self.pos += 2
                self_closing = True
                break
            if self.source[self.pos] == ">":
                self.pos += 1
                break
            attribute, closes = self._parse_attribute()
            element.attributes.append(attribute)
            if closes:
                self_closing = True
                break

        lowered = tag_name.lower()
        if self_closing or lowered in VOID_TAGS:
            return element, False
        if lowered in RAW_TEXT_TAGS:
            self._parse_raw_text(element)
            return element, False
        return element, True

    def _parse_attribute(self) -> Tuple[Attribute, bool]:
        """Parse one attribute; the flag is True if an unquoted value ran into ``/>``."""
        start = self.pos
        match = PATTERNS["attr_name"].match(self.source, self.pos)
        if not match:
            raise self._error(f"Unexpected character {self.source[self.pos]!r} in tag", self.pos)
        key = match.group(0)
        self.pos = match.end()
        self._skip_whitespace()

        if self.pos >= self.length or self.source[self.pos] != "=":
            return Attribute(key, None, self._location(start)), False

        self.pos += 1
        self._skip_whitespace()
        if self.pos >= self.length:
            raise self._error(f"Missing value for attribute {key}", start)

        quote = self.source[self.pos]
        if quote in ("'", '"'):
            end = self.source.find(quote, self.pos + 1)
            if end == -1:
                raise self._error(f"Unterminated value for attribute {key}", self.pos)
            value = self.source[self.pos + 1:end]
            self.pos = end + 1
            return Attribute(key, value, self._location(start)), False

        match = PATTERNS["attr_unquoted"].match(self.source, self.pos)
        value = match.group(0)
        self.pos = match.end()
        if value.endswith("/") and self.source.startswith(">", self.pos):
            self.pos += 1
            return Attribute(key, value[:-1], self._location(start)), True
        return Attribute(key, value, self._location(start)), False

    def _parse_raw_text(self, element: Element):
        pattern = re.compile(r"</\s*" + re.escape(element.tag_name) + r"\s*>", re.IGNORECASE)
        match = pattern.search(self.source, self.pos)
        if not match:
            raise self._error(f"Unterminated <{element.tag_name}> element", self.pos)
        content = self.source[self.pos:match.start()]
        if content:
            element.children.append(Text(content, self._location(self.pos)))
        self.pos = match.end()

    def _parse_text(self) -> Text:
        start = self.pos
        src = self.source
        index = start
        while index < self.length:
            lt = src.find("<", index)
            if lt == -1:
                index = self.length
                break
            open_brace = src.find("{{", index)
            if open_brace != -1 and open_brace < lt:
                close_brace = src.find("}}", open_brace + 2)
                if close_brace != -1:
                    index = close_brace + 2
                    continue
            if lt > start and PATTERNS["tag_like"].match(src, lt):
                index = lt
                break
            # a lone "<" that does not start markup is plain text
            index = lt + 1
        self.pos = index
        return Text(src[start:index], self._location(start))


def parse_markup(source: str) -> List[MarkupNode]:
    """
    Parse WXML source into a list of top-level nodes.

    Args:
        source: WXML text

    Returns:
        List of Element, Text and Comment nodes

    Raises:
        ParseError: On unterminated comments, tags or attribute values
    """
    return MarkupParser(source).parse()
