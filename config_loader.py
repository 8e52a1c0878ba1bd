"""Configuration loader with YAML, environment variable and CLI argument support."""

import copy
import os
import re
from dataclasses import fields
from typing import Any, Dict, List, Mapping, Optional

import yaml

from converters.errors import ConfigurationError
from models import ConverterConfig

# Field name -> environment variable
ENV_VARS = {
    'input_folder': 'INPUT_FOLDER',
    'output_folder': 'OUTPUT_FOLDER',
    'image_folder': 'IMAGE_FOLDER',
    'link_prefix': 'RELATIVE_LINK_PATH',
    'asset_prefix': 'RELATIVE_IMAGE_PATH',
    'ignore_tags': 'IGNORE_TAGS',
    'ignore_meta': 'IGNORE_META',
    'organizing_tag': 'ORGANIZING_TAG',
    'unnest_tags': 'UNNEST_TAGS',
    'italics_to_alt': 'ITALICS_TO_ALT',
    'max_workers': 'MAX_WORKERS',
}

LIST_FIELDS = {'ignore_tags', 'ignore_meta'}
BOOL_FIELDS = {'unnest_tags', 'italics_to_alt'}
INT_FIELDS = {'max_workers'}

TRUE_VALUES = {'true', '1', 'yes', 'on'}
FALSE_VALUES = {'false', '0', 'no', 'off', ''}


class ConfigLoader:
    """Builds a ConverterConfig from defaults, a YAML file, the environment and CLI arguments."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')
    SECTION = 'conversion'

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load the conversion section of a YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Raw settings dictionary (field name -> value)

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file is not a mapping
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration file must contain a dictionary")

        config_data = cls._substitute_env_vars_recursive(config_data)
        section = config_data.get(cls.SECTION, config_data)
        if not isinstance(section, dict):
            raise ConfigurationError(f"'{cls.SECTION}' section must be a dictionary")
        return section

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Read settings from environment variables; unset variables are skipped."""
        environ = os.environ if environ is None else environ
        settings = {}
        for field_name, var_name in ENV_VARS.items():
            if var_name in environ:
                settings[field_name] = environ[var_name]
        return settings

    @classmethod
    def merge_with_args(cls, settings: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge settings with CLI arguments. CLI arguments take precedence.

        Args:
            settings: Base settings dictionary
            args: argparse namespace; attributes left as None are ignored

        Returns:
            Merged settings dictionary
        """
        merged = copy.deepcopy(settings)
        arg_names = {
            'input_dir': 'input_folder',
            'output_dir': 'output_folder',
            'asset_dir': 'image_folder',
            'link_prefix': 'link_prefix',
            'asset_prefix': 'asset_prefix',
            'ignore_tags': 'ignore_tags',
            'ignore_meta': 'ignore_meta',
            'organizing_tag': 'organizing_tag',
            'unnest_tags': 'unnest_tags',
            'italics_to_alt': 'italics_to_alt',
            'workers': 'max_workers',
        }
        for arg_name, field_name in arg_names.items():
            value = getattr(args, arg_name, None)
            if value is not None:
                merged[field_name] = value
        return merged

    @classmethod
    def build(
        cls,
        config_path: Optional[str] = None,
        args=None,
        environ: Optional[Mapping[str, str]] = None
    ) -> ConverterConfig:
        """
        Resolve the effective configuration.

        Precedence, lowest to highest: defaults, YAML file, environment, CLI arguments.
        """
        settings: Dict[str, Any] = {}
        if config_path:
            settings.update(cls.load(config_path))
        settings.update(cls.from_env(environ))
        if args is not None:
            settings = cls.merge_with_args(settings, args)
        return cls.to_config(settings)

    @classmethod
    def to_config(cls, settings: Dict[str, Any]) -> ConverterConfig:
        """Coerce raw settings into a validated ConverterConfig."""
        known = {f.name for f in fields(ConverterConfig)}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = {}
        for name, value in settings.items():
            if name in LIST_FIELDS:
                values[name] = parse_list(value)
            elif name in BOOL_FIELDS:
                values[name] = parse_bool(value, name)
            elif name in INT_FIELDS:
                values[name] = parse_int(value, name)
            elif value is None:
                continue
            else:
                values[name] = str(value)

        config = ConverterConfig(**values)
        cls.validate(config)
        return config

    @classmethod
    def validate(cls, config: ConverterConfig) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If validation fails
        """
        for name in ('input_folder', 'output_folder', 'image_folder'):
            if not getattr(config, name):
                raise ConfigurationError(f"Missing required configuration: {name}")
            cls._check_substituted(getattr(config, name), name)

        if config.max_workers < 1:
            raise ConfigurationError("max_workers must be a positive integer")

        if os.path.exists(config.output_folder) and not os.path.isdir(config.output_folder):
            raise ConfigurationError(f"output_folder '{config.output_folder}' is not a directory")

    @classmethod
    def _check_substituted(cls, value: str, field_name: str) -> None:
        """Reject values still containing ${VAR} placeholders."""
        match = cls.ENV_VAR_PATTERN.search(value)
        if match:
            raise ConfigurationError(
                f"Configuration field '{field_name}' contains unsubstituted environment variable: {value}. "
                f"Please set the {match.group(1)} environment variable or provide a value in config file."
            )

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)


def parse_list(value: Any) -> List[str]:
    """Comma-separated string or list -> trimmed, lower-cased, non-empty items."""
    if value is None:
        return []
    items = value.split(',') if isinstance(value, str) else list(value)
    return [str(item).strip().lower() for item in items if str(item).strip()]


def parse_bool(value: Any, field_name: str = 'value') -> bool:
    """Accept real booleans and true/false/1/0/yes/no/on/off strings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{field_name} must be a boolean, got {value!r}")


def parse_int(value: Any, field_name: str = 'value') -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{field_name} must be an integer, got {value!r}")


__all__ = ['ConfigLoader', 'parse_list', 'parse_bool', 'parse_int', 'ENV_VARS']
