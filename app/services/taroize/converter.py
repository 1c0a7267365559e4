"""
WXML + mini-program script to Taro converter.

Ties the template pipeline, the script pipeline and the code generator
together.
"""
import json as jsonlib
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from app.config import settings

from . import nodes as n
from .errors import ConversionError, NestingTooDeepError, ParseError
from .generator import generate
from .script import ComponentDefinition, ScriptTransformer
from .types import ConversionOptions, ConvertedResult
from .utils import to_literal
from .wxml import parse_wxml

logger = logging.getLogger(__name__)


PageConfig = Union[str, Dict[str, Any], None]


class TaroizeConverter:
    """
    Converts a mini-program page (WXML, script and page JSON) into a Taro
    class component module.

    Every call builds its own trees; a converter instance holds no state
    between calls and can be shared.

    Example:
        converter = TaroizeConverter()
        result = converter.convert(
            wxml='<view wx:if="{{show}}">{{title}}</view>',
            script="Page({ data: { show: true, title: 'Hi' } })",
        )
        print(result['code'])
    """

    def convert(
        self,
        wxml: Optional[str] = None,
        script: Optional[str] = None,
        json: PageConfig = None,
        options: ConversionOptions = None,
    ) -> ConvertedResult:
        """
        Convert a page to Taro source code.

        Args:
            wxml: WXML template source
            script: Page/Component/App registration script
            json: Page configuration as JSON text or an already decoded dict
            options: Per-call overrides of the namespace, class and key names

        Returns:
            ConvertedResult with the generated code, imported components,
            state keys and registration kind

        Raises:
            ConversionError: If any input cannot be converted
        """
        program, components, definition = self._convert(wxml, script, json, options)
        code = _generate(program)

        kind = definition.kind if definition else None
        logger.info(f"Converted {kind or 'script'} with {len(components)} component(s)")
        return {
            "code": code,
            "components": components,
            "stateKeys": list(definition.state_keys) if definition else [],
            "kind": kind,
        }

    def convert_to_ast(
        self,
        wxml: Optional[str] = None,
        script: Optional[str] = None,
        json: PageConfig = None,
        options: ConversionOptions = None,
    ) -> n.Program:
        """Convert a page and return the module tree instead of source code."""
        return self._convert(wxml, script, json, options)[0]

    def convert_wxml(self, wxml: str, options: ConversionOptions = None) -> str:
        """
        Convert a WXML template alone.

        Args:
            wxml: WXML template source
            options: Conversion options (only ``keyAttribute`` applies)

        Returns:
            JSX source of the ``Block`` element wrapping the template
        """
        resolved = resolve_options(options)
        try:
            result = parse_wxml(wxml, resolved["keyAttribute"])
        except RecursionError:
            raise NestingTooDeepError("Template nesting too deep") from None
        except ConversionError as e:
            raise e.with_frame(wxml)
        return _generate(result.ast)

    def _convert(
        self,
        wxml: Optional[str],
        script: Optional[str],
        json: PageConfig,
        options: ConversionOptions,
    ) -> Tuple[n.Program, List[str], Optional[ComponentDefinition]]:
        resolved = resolve_options(options)

        returned = None
        components: List[str] = []
        if wxml is not None:
            try:
                template = parse_wxml(wxml, resolved["keyAttribute"])
            except RecursionError:
                raise NestingTooDeepError("Template nesting too deep") from None
            except ConversionError as e:
                raise e.with_frame(wxml)
            returned = template.ast
            components = template.used_components

        config = parse_page_config(json)

        transformer = ScriptTransformer(
            legacy_namespace=resolved["legacyNamespace"],
            target_namespace=resolved["targetNamespace"],
            class_name=resolved["className"],
            components_package=settings.COMPONENTS_PACKAGE,
            framework_package=settings.FRAMEWORK_PACKAGE,
            decorator_package=settings.DECORATOR_PACKAGE,
            decorator_name=settings.DECORATOR_NAME,
        )
        try:
            result = transformer.transform(script, returned, config, components)
        except RecursionError:
            raise NestingTooDeepError("Script nesting too deep") from None
        except ConversionError as e:
            raise e.with_frame(script or "")
        return result.ast, components, result.definition


def _generate(tree: n.Node) -> str:
    try:
        return generate(tree)
    except RecursionError:
        raise NestingTooDeepError("Output nesting too deep") from None


def resolve_options(options: Optional[ConversionOptions]) -> Dict[str, str]:
    """Fill in every option not given in ``options`` from the settings."""
    options = options or {}
    return {
        "legacyNamespace": options.get("legacyNamespace") or settings.LEGACY_NAMESPACE,
        "targetNamespace": options.get("targetNamespace") or settings.TARGET_NAMESPACE,
        "className": options.get("className") or settings.DEFAULT_CLASS_NAME,
        "keyAttribute": options.get("keyAttribute") or settings.KEY_ATTRIBUTE,
    }


def parse_page_config(json: PageConfig) -> Optional[n.ObjectExpression]:
    """
    Turn page JSON into the object literal used for the ``config`` member.

    Args:
        json: JSON text, a decoded dict, or None

    Returns:
        ObjectExpression, or None when no configuration was given

    Raises:
        ParseError: If the JSON text is malformed
        ConversionError: If the configuration is not a JSON object
        NestingTooDeepError: If the configuration nests too deeply
    """
    if json is None:
        return None
    if isinstance(json, str):
        if not json.strip():
            return None
        try:
            json = jsonlib.loads(json)
        except jsonlib.JSONDecodeError as e:
            raise ParseError(f"Invalid page configuration JSON: {e.msg}", e.lineno, e.colno - 1) from e
        except RecursionError:
            raise NestingTooDeepError("Page configuration nesting too deep") from None
    if not isinstance(json, dict):
        raise ConversionError("Page configuration must be a JSON object")
    try:
        return to_literal(json)
    except RecursionError:
        raise NestingTooDeepError("Page configuration nesting too deep") from None


def convert_page(
    wxml: Optional[str] = None,
    script: Optional[str] = None,
    json: PageConfig = None,
    options: ConversionOptions = None,
) -> ConvertedResult:
    """
    Convenience function to convert a page to Taro.

    Args:
        wxml: WXML template source
        script: Registration script source
        json: Page configuration
        options: Conversion options

    Returns:
        ConvertedResult with the generated code
    """
    return TaroizeConverter().convert(wxml, script, json, options)


def convert_wxml(wxml: str, options: ConversionOptions = None) -> str:
    """Convenience function to convert a WXML template to JSX source."""
    return TaroizeConverter().convert_wxml(wxml, options)
