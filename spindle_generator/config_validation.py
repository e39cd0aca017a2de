"""
Configuration schema and loading for Spindle Generator.

Configuration comes from a YAML file, is overridden by explicitly given CLI
arguments, and is validated with pydantic. The resulting model is passed to
the components that need it; there is no process-wide settings object.
"""

import logging
import os
from argparse import Namespace
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Self

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .constants import DefaultConfig, MetadataNaming, SupportedDatabases
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def is_valid_dotted_identifier(name: str) -> bool:
    """Check that every dot-separated part of a name is an identifier."""
    return bool(name) and all(part.isidentifier() for part in name.split("."))


class DatabaseSettings(BaseModel):
    """Schema for a single database connection within the DATABASES dict."""

    ENGINE: str = Field(
        ...,
        min_length=1,
        description="Django database engine (e.g., 'django.db.backends.postgresql').",
    )
    NAME: str = Field(..., min_length=1, description="Database name (file path for SQLite).")
    USER: Optional[str] = Field(default=None, description="Database user.")
    PASSWORD: Optional[str] = Field(default=None, description="Database password.")
    HOST: Optional[str] = Field(default=None, description="Database host address.")
    PORT: Optional[int] = Field(default=None, description="Database port number.")
    OPTIONS: Dict[str, Any] = Field(
        default_factory=dict, description="Database engine specific options."
    )

    @field_validator("ENGINE")
    @classmethod
    def validate_engine(cls, v: str) -> str:
        if v not in SupportedDatabases.ALL:
            raise ValueError(
                f"Database engine: {v} is not supported. "
                f"Supported engines are: {', '.join(SupportedDatabases.ALL)}"
            )
        return v

    @field_validator("PORT", mode="before")
    @classmethod
    def validate_port(cls, v: Any) -> Optional[int]:
        """Accept a port as a number or a string of digits, within range."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            if not v.isdigit():
                raise ValueError(f"Port must be a number or string containing only digits, got '{v}'")
            v = int(v)
        elif not isinstance(v, int):
            raise TypeError(f"Port must be an integer or string containing digits, got {type(v).__name__}")

        if not 0 <= v <= 65535:
            raise ValueError(f"Port must be between 0 and 65535, got {v}")
        return v

    def to_django(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ToolConfigSchema(BaseModel):
    """Expected structure and types of the generator configuration."""

    databases: Dict[str, DatabaseSettings] = Field(
        ...,
        description="Django DATABASES setting dictionary. Must contain a 'default' key.",
    )
    platform_name: str = Field(
        DefaultConfig.PLATFORM_NAME,
        min_length=1,
        description="Root namespace of the generated code (e.g. 'Acme.Platform').",
    )
    template_folder: str = Field(
        DefaultConfig.TEMPLATE_FOLDER,
        min_length=1,
        description="Folder holding one template file per template id.",
    )
    output_folder: str = Field(
        DefaultConfig.OUTPUT_FOLDER,
        min_length=1,
        description="Root folder of generated output.",
    )
    metadata_naming: Optional[Literal["snake_case", "PascalCase"]] = Field(
        default=None,
        description="Column naming of the metadata table; defaults from the database engine.",
    )
    metadata_table: Optional[str] = Field(
        default=None,
        description="Qualified name of the metadata table; defaults from the naming convention.",
    )
    output_entity_framework6: bool = Field(
        default=DefaultConfig.OUTPUT_ENTITY_FRAMEWORK6,
        description="Also generate the legacy EF6 entity variant.",
    )
    strip_identifier_suffix: bool = Field(
        default=DefaultConfig.STRIP_IDENTIFIER_SUFFIX,
        description="Drop trailing 'Id'/'Identifier' from key variable names.",
    )
    template_engine: Literal["placeholder", "jinja"] = Field(
        default=DefaultConfig.TEMPLATE_ENGINE,
        description="'placeholder' for $Token templates (.txt), 'jinja' for Jinja2 templates (.j2).",
    )
    strict_templates: bool = Field(
        default=DefaultConfig.STRICT_TEMPLATES,
        description="Fail on placeholders that have no value instead of passing them through.",
    )
    max_workers: int = Field(
        default=DefaultConfig.MAX_WORKERS,
        ge=1,
        le=64,
        description="Entities generated concurrently; 1 generates sequentially.",
    )
    continue_on_error: bool = Field(
        default=DefaultConfig.CONTINUE_ON_ERROR,
        description="Keep generating other entities after one fails and report all failures.",
    )

    # Internal field, added by load_config if not provided by user
    SECRET_KEY: Optional[str] = Field(
        default=None, description="Internal secret key for Django setup."
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("platform_name")
    @classmethod
    def check_platform_name(cls, v: str) -> str:
        if not is_valid_dotted_identifier(v):
            raise ValueError(f"'{v}' is not a valid namespace (dot-separated identifiers).")
        return v

    @model_validator(mode="after")
    def fill_metadata_defaults(self) -> Self:
        """Require a default database and derive the metadata table settings from it."""
        if "default" not in self.databases:
            raise ValueError("The 'databases' configuration dictionary must contain a 'default' key.")

        engine = self.databases["default"].ENGINE
        if self.metadata_naming is None:
            self.metadata_naming = (
                MetadataNaming.PASCAL_CASE if engine == SupportedDatabases.SQLSERVER
                else MetadataNaming.SNAKE_CASE
            )

        if self.metadata_table is None:
            table = MetadataNaming.DEFAULT_TABLES[self.metadata_naming]
            if engine == SupportedDatabases.SQLITE:
                # SQLite has no schemas
                table = table.split(".")[-1]
            self.metadata_table = table

        return self

    @property
    def default_engine(self) -> str:
        return self.databases["default"].ENGINE


def format_validation_errors(error: ValidationError) -> str:
    """Render pydantic errors as one indented line pair per problem."""
    lines = ["--- Configuration Errors ---"]
    for item in error.errors():
        loc_parts = [str(loc_item) for loc_item in item.get("loc", ())]
        location = " -> ".join(loc_parts) if loc_parts else "Model Level"
        lines.append(f"  - Location: '{location}'")
        lines.append(f"    Error:    {item.get('msg', 'Unknown validation error')}")
        if "platform_name" in loc_parts:
            lines.append("    Hint:     Use dot-separated identifiers, e.g. 'Acme.Platform'.")
    lines.append("----------------------------")
    return "\n".join(lines)


def validate_and_parse_config(config_dict: Dict[str, Any], config_file: str = None) -> ToolConfigSchema:
    """
    Validate a raw configuration dictionary against ToolConfigSchema.

    Raises:
        ConfigurationError: With every validation problem listed
    """
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
    except ValidationError as e:
        details = format_validation_errors(e)
        logger.critical("Configuration validation failed! Please check your config file or arguments.")
        logger.error(details)
        raise ConfigurationError(
            f"Invalid configuration ({e.error_count()} problem(s))\n{details}",
            config_file=config_file,
        ) from e

    logger.debug("Configuration dictionary parsed and validated successfully against schema.")
    return validated_config


def read_config_file(config_path: str) -> Dict[str, Any]:
    """
    Read a YAML configuration file into a dictionary.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    config_file = Path(config_path)
    if not config_file.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}", config_file=config_path)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file {config_path}: {e}", config_file=config_path) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {config_path}: {e}", config_file=config_path) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(
            f"Content of config file {config_path} is not a mapping",
            config_file=config_path,
        )

    logger.debug(f"Loaded configuration from {config_path}")
    return content


def load_config(config_path: Optional[str], cli_args: Optional[Namespace] = None) -> ToolConfigSchema:
    """
    Load configuration from YAML, apply CLI overrides and validate the result.

    Only CLI arguments that were actually given (not None) and that name a
    configuration field override the file. Folder paths are resolved to
    absolute paths.
    """
    raw_config: Dict[str, Any] = read_config_file(config_path) if config_path else {}

    overridden_keys = set()
    if cli_args is not None:
        for key, value in vars(cli_args).items():
            if value is not None and key != "databases" and key in ToolConfigSchema.model_fields:
                raw_config[key] = value
                overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {sorted(overridden_keys)}")

    if "SECRET_KEY" not in raw_config:
        raw_config["SECRET_KEY"] = os.urandom(50).hex()

    logger.info("Validating final configuration...")
    config = validate_and_parse_config(raw_config, config_file=config_path)

    config.template_folder = str(Path(config.template_folder).resolve())
    config.output_folder = str(Path(config.output_folder).resolve())

    logger.info("Configuration loaded and validated successfully.")
    return config
