"""Configuration settings for the taroize service"""
import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings.

    Priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values
    """

    # Service Identity
    SERVICE_NAME: str = "taroize"
    SERVICE_PORT: int = 5002
    LOG_LEVEL: str = "INFO"

    # Namespaces
    # Global object of the mini-program API and the Taro object it becomes
    LEGACY_NAMESPACE: str = "wx"
    TARGET_NAMESPACE: str = "Taro"

    # Imports prepended to every converted module
    COMPONENTS_PACKAGE: str = "@tarojs/components"
    FRAMEWORK_PACKAGE: str = "@tarojs/taro"
    DECORATOR_PACKAGE: str = "@tarojs/with-weapp"
    DECORATOR_NAME: str = "withWeapp"

    # Generated class
    # App registrations always produce a class named App
    DEFAULT_CLASS_NAME: str = "_C"

    # Attribute wx:key is renamed to, used verbatim
    KEY_ATTRIBUTE: str = "key"

    # Request guard for the HTTP API (characters per source)
    MAX_SOURCE_LENGTH: int = 200000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def initialize_settings():
    """
    Log the effective configuration.

    Should be called during application startup.
    """
    logger.info(f"Service: {settings.SERVICE_NAME}")
    logger.info(f"Port: {settings.SERVICE_PORT}")
    logger.info(f"Namespace: {settings.LEGACY_NAMESPACE} -> {settings.TARGET_NAMESPACE}")
    logger.info(f"Components package: {settings.COMPONENTS_PACKAGE}")
    logger.info(f"Max source length: {settings.MAX_SOURCE_LENGTH}")
