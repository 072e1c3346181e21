"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    'dropbox': {
        'access_token': '${DROPBOX_ACCESS_TOKEN}',
        'root_path': ''
    },
    'export': {
        'output_directory': './paper-export',
        'use_zip': False,
        'file_extension': '.paper',
        'request_delay': 0.1
    },
    'advanced': {
        'request_timeout': 30,
        'verify_ssl': True
    },
    'logging': {
        'level': 'WARNING',
        'file': None
    }
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Values missing from the file fall back to ``DEFAULT_CONFIG``. When
        ``config_path`` is None the defaults are used on their own.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        config_data: Dict[str, Any] = {}

        if config_path is not None:
            if not os.path.exists(config_path):
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}

            if not isinstance(config_data, dict):
                raise ValueError("Configuration file must contain a dictionary")

        merged = _deep_merge(DEFAULT_CONFIG, config_data)

        # Substitute environment variables recursively
        return cls._substitute_env_vars_recursive(merged)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration values.

        The access token is not required here: it may still be typed into
        the interactive UI.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        root_path = get_nested(config, 'dropbox.root_path', '')
        if not isinstance(root_path, str):
            raise ValueError("dropbox.root_path must be a string")
        if root_path and not root_path.startswith('/'):
            raise ValueError("dropbox.root_path must be empty or an absolute path starting with /")

        cls._validate_required_field(config, 'export.output_directory')
        output_dir = get_nested(config, 'export.output_directory')
        if os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        use_zip = get_nested(config, 'export.use_zip', False)
        if not isinstance(use_zip, bool):
            raise ValueError("export.use_zip must be a boolean")

        extension = get_nested(config, 'export.file_extension', '.paper')
        if not isinstance(extension, str) or not extension.startswith('.') or len(extension) < 2:
            raise ValueError("export.file_extension must be an extension such as '.paper'")

        delay = get_nested(config, 'export.request_delay', 0.1)
        if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
            raise ValueError("export.request_delay must be a non-negative number")

        timeout = get_nested(config, 'advanced.request_timeout', 30)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError("advanced.request_timeout must be a positive number")

        verify_ssl = get_nested(config, 'advanced.verify_ssl', True)
        if not isinstance(verify_ssl, bool):
            raise ValueError("advanced.verify_ssl must be a boolean")

        level = get_nested(config, 'logging.level', 'WARNING')
        if str(level).upper() not in {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}:
            raise ValueError("logging.level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        # Ensure nested dictionaries exist
        for section in ('dropbox', 'export', 'advanced', 'logging'):
            if section not in merged:
                merged[section] = {}

        if getattr(args, 'token', None):
            merged['dropbox']['access_token'] = args.token

        if getattr(args, 'root_path', None) is not None:
            merged['dropbox']['root_path'] = args.root_path

        if getattr(args, 'output_dir', None):
            merged['export']['output_directory'] = args.output_dir

        if getattr(args, 'zip', None) is not None:
            merged['export']['use_zip'] = args.zip

        if getattr(args, 'delay', None) is not None:
            merged['export']['request_delay'] = args.delay

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        verbose = getattr(args, 'verbose', 0)
        if verbose >= 2:
            merged['logging']['level'] = 'DEBUG'
        elif verbose == 1:
            merged['logging']['level'] = 'INFO'

        return merged

    @classmethod
    def resolve_token(cls, config: Dict[str, Any]) -> str:
        """
        Return the configured access token, or '' when none is usable.

        A placeholder whose environment variable is unset counts as missing.
        """
        token = get_nested(config, 'dropbox.access_token') or ''
        if not isinstance(token, str) or cls.ENV_VAR_PATTERN.search(token):
            return ''
        return token.strip()

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
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config_section: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config_section, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        # Check for unsubstituted environment variables
        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``base`` with ``override`` merged in, section by section."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "export.output_directory")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'get_nested']
