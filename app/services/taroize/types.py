"""
Type definitions for the WXML/mini-program to Taro converter
"""
from typing import List, Literal, TypedDict


class ConversionOptions(TypedDict, total=False):
    """
    Per-call overrides of the converter settings.

    Attributes:
        legacyNamespace: Global namespace object of the mini-program API (``wx``)
        targetNamespace: Namespace it is rewritten to (``Taro``)
        className: Class name used for Page and Component registrations
        keyAttribute: Attribute name ``wx:key`` is renamed to
    """
    legacyNamespace: str
    targetNamespace: str
    className: str
    keyAttribute: str


class ConvertedResult(TypedDict):
    """
    Result of a conversion.

    Attributes:
        code: The printed Taro module
        components: Component names imported from the component library
        stateKeys: Keys destructured from ``this.state`` in render
        kind: Registration kind found in the script, or None if none was found
    """
    code: str
    components: List[str]
    stateKeys: List[str]
    kind: Literal["Page", "Component", "App", None]
