"""
Exceptions raised by the taroize compiler.

Every error is fatal to the conversion that raised it. Callers catch
``ConversionError`` and may call ``with_frame`` to attach the offending
source line before reporting.
"""
from typing import List, Optional


class ConversionError(Exception):
    """Base exception for all conversion failures"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        self.frame: Optional[str] = None
        super().__init__(message)

    @classmethod
    def at(cls, node, message: str) -> "ConversionError":
        """Build the error using the source location recorded on ``node``."""
        line, column = getattr(node, "loc", None) or (0, 0)
        return cls(message, line, column)

    def with_frame(self, source: str) -> "ConversionError":
        """Attach a code frame for ``source`` if the error has a location."""
        if self.line:
            self.frame = code_frame(source, self.line, self.column)
        return self

    def __str__(self) -> str:
        if self.frame:
            return f"{self.message}\n{self.frame}"
        return self.message


class ParseError(ConversionError):
    """Exception raised when markup or script text cannot be parsed"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(
            f"Parse error at line {line}, column {column}: {message}",
            line,
            column,
        )


class StructuralUnsupportedError(ConversionError):
    """A construct the converter refuses to handle, e.g. spread in a Page object"""


class InvalidKeyError(ConversionError):
    """A registration object property whose key is not a plain identifier"""


class DirectiveValueError(ConversionError):
    """A template directive whose value has the wrong shape"""


class NestingTooDeepError(ConversionError):
    """Input nested deeper than the converter can recurse"""


def code_frame(source: str, line: int, column: int, context: int = 2) -> str:
    """
    Render the lines around ``line`` with a caret under ``column``.

    Args:
        source: Full source text
        line: 1-based line number
        column: 0-based column number
        context: Number of lines shown before and after

    Returns:
        Multi-line string suitable for error output
    """
    lines = source.splitlines()
    if not lines or line < 1 or line > len(lines):
        return ""

    start = max(1, line - context)
    end = min(len(lines), line + context)
    width = len(str(end))

    output: List[str] = []
    for number in range(start, end + 1):
        marker = ">" if number == line else " "
        output.append(f"{marker} {number:>{width}} | {lines[number - 1]}")
        if number == line:
            output.append(f"  {' ' * width} | {' ' * column}^")
    return "\n".join(output)
