"""
Configuration loading utilities for the schema studio.

Loads config.yaml, deep-merges it over the built-in defaults and falls back
to the defaults when the file is missing or unreadable.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
import logging
from copy import deepcopy

from .schema_exceptions import ConfigurationLoadError

logger = logging.getLogger(__name__)

SUPPORTED_DOCUMENT_FORMATS = ('json', 'yaml')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Schema Studio',
            'version': '1.0.0',
            'debug': False
        },
        'editor': {
            'document_format': 'json',
            'indent': 2
        },
        'engine': {
            'max_depth': 32
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        },
        'ui': {
            'page_title': 'Schema Studio'
        }
    }


def load_config(config_path: Optional[Path] = None, strict: bool = False) -> Dict[str, Any]:
    """
    Load application configuration.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)
        strict: Raise ConfigurationLoadError instead of falling back to defaults

    Returns:
        Complete configuration dictionary

    Raises:
        ConfigurationLoadError: In strict mode, if the file is missing or invalid
    """
    if config_path is None:
        config_path = Path("config.yaml")
    config_path = Path(config_path)

    default_config = get_default_config()

    if not config_path.exists():
        if strict:
            raise ConfigurationLoadError(config_path, FileNotFoundError(str(config_path)))
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        if strict:
            raise ConfigurationLoadError(config_path, e) from e
        logger.error(f"YAML parsing error in {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config
    except (IOError, OSError) as e:
        if strict:
            raise ConfigurationLoadError(config_path, e) from e
        logger.error(f"Failed to read configuration file {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config

    if user_config is None:
        logger.warning(f"Configuration file is empty: {config_path}")
        return default_config

    if not isinstance(user_config, dict):
        error = ValueError("configuration root must be a mapping")
        if strict:
            raise ConfigurationLoadError(config_path, error)
        logger.error(f"Configuration file is not a valid dictionary: {config_path}")
        logger.info("Using default configuration")
        return default_config

    config = deep_merge(default_config, user_config)

    for section, defaults in default_config.items():
        if not isinstance(config.get(section), dict):
            if strict:
                raise ConfigurationLoadError(config_path, ValueError(f"section '{section}' must be a mapping"))
            logger.warning(f"Configuration section '{section}' is not a mapping; using defaults")
            config[section] = deepcopy(defaults)

    problems = validate_config(config)
    if problems:
        if strict:
            raise ConfigurationLoadError(config_path, ValueError("; ".join(problems)))
        for problem in problems:
            logger.warning(f"Invalid configuration value: {problem}")
        config = _repair_config(config, problems)

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration values.

    Args:
        config: Configuration dictionary to validate

    Returns:
        List of problems (empty when valid)
    """
    problems = []

    editor = _section(config, 'editor')
    if editor.get('document_format') not in SUPPORTED_DOCUMENT_FORMATS:
        problems.append(
            f"editor.document_format must be one of {', '.join(SUPPORTED_DOCUMENT_FORMATS)}"
        )

    indent = editor.get('indent')
    if not isinstance(indent, int) or isinstance(indent, bool) or indent < 0:
        problems.append("editor.indent must be a non-negative integer")

    max_depth = _section(config, 'engine').get('max_depth')
    if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth <= 0:
        problems.append("engine.max_depth must be a positive integer")

    level = _section(config, 'logging').get('level')
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        problems.append(f"logging.level must be one of {', '.join(LOG_LEVELS)}")

    return problems


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    values = config.get(name)
    return values if isinstance(values, dict) else {}


def _repair_config(config: Dict[str, Any], problems: List[str]) -> Dict[str, Any]:
    """Reset every invalid value named in ``problems`` to its default."""
    defaults = get_default_config()
    repaired = deepcopy(config)
    for problem in problems:
        dotted = problem.split(' ', 1)[0]
        section, key = dotted.split('.', 1)
        if not isinstance(repaired.get(section), dict):
            repaired[section] = {}
        repaired[section][key] = defaults[section][key]
    return repaired


def get_config_value(config: Dict[str, Any], section: str, key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        config: Configuration dictionary
        section: Configuration section (e.g., 'editor', 'engine')
        key: Configuration key within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    section_values = config.get(section, {})
    if not isinstance(section_values, dict):
        return default
    return section_values.get(key, default)
