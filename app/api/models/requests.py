"""Request and response models for API endpoints"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Union


class ConvertOptions(BaseModel):
    """Per-request overrides of the conversion settings"""
    legacyNamespace: Optional[str] = None   # Defaults to settings.LEGACY_NAMESPACE
    targetNamespace: Optional[str] = None   # Defaults to settings.TARGET_NAMESPACE
    className: Optional[str] = None         # Class name for Page/Component
    keyAttribute: Optional[str] = None      # Attribute wx:key is renamed to


class ConvertRequest(BaseModel):
    """Request to convert a mini-program page"""
    wxml: Optional[str] = None
    script: Optional[str] = None
    pageConfig: Optional[Union[str, Dict[str, Any]]] = Field(None, alias="json")  # Page JSON (text or object)
    options: ConvertOptions = ConvertOptions()


class ConvertResponse(BaseModel):
    """Converted Taro module"""
    success: bool
    code: str
    components: List[str] = []
    stateKeys: List[str] = []
    kind: Optional[str] = None


class WxmlRequest(BaseModel):
    """Request to convert a WXML template alone"""
    wxml: str
    options: ConvertOptions = ConvertOptions()


class WxmlResponse(BaseModel):
    """JSX produced from a WXML template"""
    success: bool
    jsx: str
