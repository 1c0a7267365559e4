"""Conversion API routes - mini-program page and WXML to Taro"""
from fastapi import APIRouter, HTTPException
from typing import Optional
import logging

from app.config import settings
from app.api.models import (
    ConvertRequest,
    ConvertResponse,
    WxmlRequest,
    WxmlResponse
)
from app.services.taroize import ConversionError, TaroizeConverter

logger = logging.getLogger(__name__)

router = APIRouter()

converter = TaroizeConverter()


def _check_length(name: str, source: Optional[str]):
    """Reject a source longer than settings.MAX_SOURCE_LENGTH with 413."""
    if source is not None and len(source) > settings.MAX_SOURCE_LENGTH:
        raise HTTPException(
            status_code=413,
            detail=f"{name} exceeds {settings.MAX_SOURCE_LENGTH} characters"
        )


def _error_detail(e: ConversionError) -> dict:
    return {
        "error": type(e).__name__,
        "message": e.message,
        "line": e.line,
        "column": e.column,
        "frame": e.frame
    }


@router.post("/convert", response_model=ConvertResponse)
def convert(request: ConvertRequest):
    """
    Convert a mini-program page to a Taro class component.

    Accepts any subset of the WXML template, the registration script and
    the page configuration. A missing script converts as an empty Page.

    Returns:
        Generated module source with the imported components, state keys
        and registration kind

    Raises:
        413 when a source is too long, 422 when it cannot be converted
    """
    _check_length("wxml", request.wxml)
    _check_length("script", request.script)
    if isinstance(request.pageConfig, str):
        _check_length("json", request.pageConfig)

    try:
        result = converter.convert(
            wxml=request.wxml,
            script=request.script,
            json=request.pageConfig,
            options=request.options.model_dump(exclude_none=True)
        )
    except ConversionError as e:
        logger.warning(f"Conversion failed: {e.message}")
        raise HTTPException(status_code=422, detail=_error_detail(e))

    return ConvertResponse(success=True, **result)


@router.post("/wxml", response_model=WxmlResponse)
def convert_template(request: WxmlRequest):
    """Convert a WXML template to JSX source."""
    _check_length("wxml", request.wxml)

    try:
        jsx = converter.convert_wxml(
            request.wxml,
            options=request.options.model_dump(exclude_none=True)
        )
    except ConversionError as e:
        logger.warning(f"Template conversion failed: {e.message}")
        raise HTTPException(status_code=422, detail=_error_detail(e))

    return WxmlResponse(success=True, jsx=jsx)
