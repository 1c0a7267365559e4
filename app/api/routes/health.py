"""Health check endpoint for load balancers"""
from fastapi import APIRouter
from app.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "UP", "service": settings.SERVICE_NAME}


@router.get("/info")
async def info():
    """Service info endpoint"""
    from app import __version__
    return {
        "service": settings.SERVICE_NAME,
        "version": __version__,
        "description": "Taroize Service - WXML and mini-program script to Taro conversion",
        "conversion": {
            "legacyNamespace": settings.LEGACY_NAMESPACE,
            "targetNamespace": settings.TARGET_NAMESPACE,
            "componentsPackage": settings.COMPONENTS_PACKAGE,
            "keyAttribute": settings.KEY_ATTRIBUTE,
            "maxSourceLength": settings.MAX_SOURCE_LENGTH
        }
    }
