"""
Configuration-related commands for the CityTZ CLI.

This module provides commands for interacting with the CityTZ configuration system,
including viewing, initializing, and validating configurations.
"""

import os
import yaml
import json
from pathlib import Path
from typing import Optional

import click

from CityTZ.config import get_config, validate_config
from CityTZ.config.manager import CONFIG_FILE_NAME
from CityTZ.utils.logging import get_logger

# Get logger for this module
logger = get_logger(__name__)

def config_show(format_type: str = 'yaml', section: Optional[str] = None) -> int:
    """
    Display the current active configuration.

    Args:
        format_type: Output format (yaml or json)
        section: Optional section or dotted key to display (e.g., 'limits', 'api.port')

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    config = get_config()

    if section:
        config_data = config.get(section)
        if config_data is None:
            click.echo(f"Error: Section '{section}' not found in configuration", err=True)
            return 1
    else:
        config_data = config.get_all()

    if format_type.lower() == 'json':
        click.echo(json.dumps(config_data, indent=2))
    else:
        click.echo(yaml.safe_dump(config_data, default_flow_style=False, sort_keys=False))

    return 0

def config_init(output_path: Optional[str] = None, force: bool = False) -> int:
    """
    Create a template configuration file with explanatory comments.

    Args:
        output_path: Path where to create the template file (default: ./citytz.yml)
        force: Overwrite an existing file without asking

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not output_path:
        output_path = os.path.join(os.getcwd(), CONFIG_FILE_NAME)

    output_path = Path(output_path)

    if output_path.exists() and not force:
        click.confirm(f"File {output_path} already exists. Overwrite?", abort=True)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(_create_config_template())
    except OSError as e:
        logger.error(f"Error creating configuration template: {str(e)}")
        click.echo(f"Error: Could not write {output_path}: {e}", err=True)
        return 1

    click.echo(f"Configuration template created at: {output_path}")
    return 0

def config_validate(config_path: str) -> int:
    """
    Validate a configuration file.

    Args:
        config_path: Path to the configuration file to validate

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    path = Path(config_path)

    if not path.exists():
        click.echo(f"Error: Configuration file not found: {path}", err=True)
        return 1

    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in ('.yaml', '.yml'):
                config_data = yaml.safe_load(f)
            elif path.suffix.lower() == '.json':
                config_data = json.load(f)
            else:
                click.echo(f"Error: Unsupported file format: {path.suffix}", err=True)
                return 1
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        click.echo(f"Error: Could not parse {path}: {e}", err=True)
        return 1

    errors = validate_config(config_data)

    if not errors:
        click.echo(f"Configuration file is valid: {path}")
        return 0

    click.echo("Configuration validation errors:")
    for section, section_errors in errors.items():
        for error in section_errors:
            click.echo(f"  - {section}: {error}")
    return 1

def _create_config_template() -> str:
    """
    Create a template configuration file with explanatory comments.

    Returns:
        YAML string with the template configuration
    """
    template = """# CityTZ Configuration File
# This is a template configuration file for CityTZ with explanatory comments.
# You can customize this file to fit your needs or use the defaults.

# Data Configuration
data:
  # Path to cityMap.json (null = CITYTZ_DATA_FILE or the bundled dataset)
  location: null

# Search Configuration
search:
  # Maximum size in bytes of an exact city-name lookup
  max_city_length: 100
  # Maximum size in bytes of a free-text search
  max_query_length: 200

  # Search Results Limits
  limits:
    # Default number of results
    default: 10
    # Maximum number of results allowed
    max: 1000

# Admission Control
limits:
  # Sliding-window rate limiting per client
  rate_limit:
    enabled: true
    # Requests admitted per window
    limit: 100
    window: 60  # seconds

  # Search resource budget
  resources:
    enabled: true
    max_memory_mb: 500
    max_concurrent_searches: 50
    # Budget charged to each search while it runs
    search_memory_mb: 1

# Logging Configuration
logging:
  # Logging level (debug, info, warning, error, critical)
  level: info
  # Log format (json, text)
  format: text
  # Log file path (null for console only)
  file: null

# API Server Configuration
api:
  host: 0.0.0.0
  port: 5000
  debug: false
"""
    return template
