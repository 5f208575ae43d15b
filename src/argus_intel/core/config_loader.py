"""
Configuration loader for Argus Intel.

Two things are loaded once, at import time:

* ``CONFIG``: non-secret application settings from ``config.yaml``.
* ``API_KEYS``: the Gemini API key, taken from the first source that has it:
  constructor arguments, HashiCorp Vault, a ``.env`` file, then the process
  environment. ``GOOGLE_API_KEY`` is the canonical name; ``API_KEY`` is also
  accepted.
"""

import logging
import os
import sys
from typing import Any, Dict, Optional

import hvac
import yaml
from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .schemas import AppConfig

logger = logging.getLogger(__name__)

VAULT_ENV_VARS = ("VAULT_ADDR", "VAULT_TOKEN", "VAULT_SECRET_PATH")


def get_secrets_from_vault() -> Dict[str, Any]:
    """
    Reads the KV v2 secret at ``$VAULT_SECRET_PATH``.

    Returns an empty dict, after logging why, when Vault is not configured,
    refuses the token or cannot be reached.
    """
    addr, token, path = (os.getenv(name) for name in VAULT_ENV_VARS)
    if not (addr and token and path):
        logger.info(
            "Vault environment variables not fully set. Skipping Vault integration."
        )
        return {}
    try:
        client = hvac.Client(url=addr, token=token)
        if not client.is_authenticated():
            logger.error("Vault authentication failed. Please check your VAULT_TOKEN.")
            return {}
        response = client.secrets.kv.v2.read_secret_version(path=path)
    except Exception as e:
        logger.error(f"Failed to fetch secrets from Vault: {e}")
        return {}
    secrets = (response or {}).get("data", {}).get("data", {})
    logger.info("Successfully loaded secrets from HashiCorp Vault (%d keys).", len(secrets))
    return secrets


class ApiKeys(BaseSettings):
    """Credentials for the content generation service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Vault may hold secrets for other services
        populate_by_name=True,
    )

    google_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("GOOGLE_API_KEY", "API_KEY")
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Earlier sources win.
        return (
            init_settings,
            get_secrets_from_vault,
            dotenv_settings,
            env_settings,
        )


def load_config_from_yaml(path: str = "config.yaml") -> AppConfig:
    """
    Loads and validates ``config.yaml``.

    A missing file yields the defaults. A file that cannot be read or does
    not validate is fatal: the error is logged and the process exits with 1.
    """
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("%s not found. Using default application settings.", path)
        return AppConfig()
    except Exception as e:
        logger.critical(f"An unexpected error occurred while loading {path}: {e}")
        sys.exit(1)

    try:
        return AppConfig.model_validate(raw or {})
    except ValidationError as e:
        logger.critical(
            f"Invalid configuration in {path}. Please check the structure. Error: {e}"
        )
        sys.exit(1)


CONFIG = load_config_from_yaml()
API_KEYS = ApiKeys()  # type: ignore
