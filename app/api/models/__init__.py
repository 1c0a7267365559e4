"""API models package"""
from app.api.models.requests import (
    ConvertOptions,
    ConvertRequest,
    ConvertResponse,
    WxmlRequest,
    WxmlResponse
)

__all__ = [
    "ConvertOptions",
    "ConvertRequest",
    "ConvertResponse",
    "WxmlRequest",
    "WxmlResponse"
]
