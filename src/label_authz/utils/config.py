"""Configuration loading and validation using Pydantic models."""

import os
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, field_validator

from label_authz.expression import AuthorizationExpressionError, parse

# --- Pydantic Configuration Models ---


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_output: bool = False


class LabelsConfig(BaseModel):
    """Label-set building configuration."""

    strict: bool = False  # Reject empty comma-separated items


class AuthzConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    labels: LabelsConfig = Field(default_factory=LabelsConfig)
    policies: dict[str, str] = Field(default_factory=dict)

    @field_validator("policies")
    @classmethod
    def policies_must_parse(cls, policies: dict[str, str]) -> dict[str, str]:
        for name, expression in policies.items():
            try:
                parse(expression)
            except AuthorizationExpressionError as e:
                raise ValueError(f"policy {name!r} is invalid: {e}") from e
        return policies


# --- Configuration Loading Functions ---


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern: LABEL_AUTHZ_SECTION_KEY
    Example: LABEL_AUTHZ_LOGGING_LEVEL overrides logging.level

    Args:
        config: Configuration dictionary to modify

    Returns:
        Modified configuration dictionary
    """
    env_mapping = {
        "LABEL_AUTHZ_LOGGING_LEVEL": ("logging", "level"),
        "LABEL_AUTHZ_LOGGING_JSON_OUTPUT": ("logging", "json_output"),
        "LABEL_AUTHZ_LABELS_STRICT": ("labels", "strict"),
    }

    for env_var, (section, key) in env_mapping.items():
        env_value = os.environ.get(env_var)
        if env_value is not None:
            if section not in config or config[section] is None:
                config[section] = {}

            final_value: str | bool = env_value
            if key in ("json_output", "strict"):
                final_value = env_value.lower() in ("1", "true", "yes", "on")

            config[section][key] = final_value

    return config


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """
    Load raw YAML configuration from file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid
        ValueError: If the document is not a mapping
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(
            f"Config file must contain a mapping, got {type(config).__name__}: {config_path}"
        )

    return config


def load_config(config_path: str | Path = "config/default.yaml") -> AuthzConfig:
    """
    Load and validate configuration from YAML file.

    Applies environment variable overrides and validates using Pydantic.
    Every policy expression is parsed once during validation.

    Args:
        config_path: Path to configuration file

    Returns:
        Validated AuthzConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid
        ValueError: If the document is not a mapping
        pydantic.ValidationError: If configuration or a policy is invalid

    Examples:
        >>> config = load_config()
        >>> config.policies["admin_only"]
        'admin'
    """
    raw_config = load_yaml(config_path)
    config_with_overrides = _apply_env_overrides(raw_config)
    return AuthzConfig(**config_with_overrides)
