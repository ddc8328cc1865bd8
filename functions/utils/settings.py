"""
functions/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single source of truth* for runtime configuration
of the Shopify Customer Metrics Proxy.

It is responsible for:
- Defining all supported configuration fields (via Pydantic BaseSettings)
- Loading default values from parameters/parameters.yaml
- Overriding defaults with environment variables (SECRET_API_KEY, SHOP_NAME, ...)
- Exposing a cached, validated Settings object to the application entrypoint

LOAD & PRECEDENCE MODEL
-----------------------
Configuration is loaded in the following order (last wins):

1) YAML defaults from:
       parameters/parameters.yaml
2) Environment variables (unprefixed, case-insensitive):
       SECRET_API_KEY, SHOPIFY_ACCESS_TOKEN, SHOP_NAME,
       SHOPIFY_API_VERSION, PORT, LOG_LEVEL, ...

Secrets (shared secret, Shopify access token) are expected to come from the
environment only. The YAML file carries non-secret defaults.

MISSING CREDENTIALS
-------------------
Unlike URL-style settings, missing credentials do NOT fail startup.
The process must still answer pre-flight and health probes, and every
POST reports the problem as a configuration error (HTTP 500) so the
operator sees it in the logs while the caller gets a generic message.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Request validation
- HTTP calls
- Deciding what a missing credential means for a request

Request-path code receives a Settings instance through create_app();
it never calls get_settings() itself.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

PARAMETERS_PATH = Path(__file__).resolve().parents[2] / "parameters" / "parameters.yaml"

DEFAULT_SHOPIFY_API_VERSION = "2025-04"


class Settings(BaseSettings):
    """
    Runtime settings for the Shopify Customer Metrics Proxy.

    Load order / precedence:
        1) YAML defaults (parameters/parameters.yaml)
        2) Environment variables, overriding YAML
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        frozen=True,
    )

    # Service metadata
    service_name: str = "shopify-customer-metrics-proxy"
    environment: str = "local"
    log_level: str = "INFO"

    # Inbound authentication
    secret_api_key: Optional[SecretStr] = Field(
        default=None,
        description="Shared secret the pixel sends as apiKey.",
    )

    # Upstream (Shopify Admin API)
    shopify_access_token: Optional[SecretStr] = Field(
        default=None,
        description="Private Admin API access token. Server side only.",
    )
    shop_name: Optional[str] = Field(
        default=None,
        description="Shop host without protocol, e.g. mystore.myshopify.com",
    )
    shopify_api_version: str = DEFAULT_SHOPIFY_API_VERSION
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # Process bootstrap
    host: str = "0.0.0.0"
    port: int = 8080

    @field_validator("shop_name")
    @classmethod
    def _strip_shop_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        for prefix in ("https://", "http://"):
            if value.lower().startswith(prefix):
                value = value[len(prefix):]
        return value.rstrip("/") or None

    @field_validator("shopify_api_version")
    @classmethod
    def _default_blank_api_version(cls, value: str) -> str:
        return value.strip() or DEFAULT_SHOPIFY_API_VERSION


@lru_cache(maxsize=1)
def _load_yaml_parameters() -> Dict[str, Any]:
    """
    Load base configuration from parameters/parameters.yaml.

    Cached to guarantee consistent config during process lifetime.
    """
    if not PARAMETERS_PATH.exists():
        logger.warning("parameters_yaml_missing", expected=str(PARAMETERS_PATH))
        return {}

    try:
        with PARAMETERS_PATH.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(
                "parameters_yaml_not_dict",
                path=str(PARAMETERS_PATH),
                type=type(data).__name__,
            )
            return {}
        logger.info("parameters_yaml_loaded", path=str(PARAMETERS_PATH))
        return data
    except (OSError, yaml.YAMLError) as exc:
        logger.error("parameters_yaml_load_error", path=str(PARAMETERS_PATH), error=str(exc))
        return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Construct and return the final validated Settings object.

    Cached (singleton per process). Called once by the application
    entrypoint; the result is passed explicitly into create_app().
    """
    # 1) YAML defaults
    yaml_data = _load_yaml_parameters()

    # 2) env overrides (partial)
    try:
        env_settings = Settings()
        env_data = env_settings.model_dump(exclude_unset=True)
        logger.info("settings_loaded_env_only_partial", fields=sorted(env_data.keys()))
    except ValidationError as exc:
        logger.warning("settings_env_validation_error", errors=exc.errors())
        env_data = {}

    # 3) merge + final validation
    merged: Dict[str, Any] = {**yaml_data, **env_data}
    settings = Settings.model_validate(merged)

    logger.info(
        "settings_loaded",
        environment=settings.environment,
        service_name=settings.service_name,
        shop_name=settings.shop_name,
        shopify_api_version=settings.shopify_api_version,
        upstream_timeout_seconds=settings.upstream_timeout_seconds,
        secret_api_key_configured=settings.secret_api_key is not None,
        shopify_access_token_configured=settings.shopify_access_token is not None,
        port=settings.port,
    )

    return settings
