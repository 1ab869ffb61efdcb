"""
Command-line interface (CLI) commands for the CityTZ package.

This module provides CLI commands for looking up cities and their timezones
from the command line.
"""

import sys
from typing import List

import click
import pandas as pd

from CityTZ import __version__
from CityTZ.api.server import start_server
from CityTZ.config import get_config
from CityTZ.cli.config_commands import config_show, config_init, config_validate
from CityTZ.data.models import CityRecord
from CityTZ.data.validation import validate_query
from CityTZ.exceptions import CityTZError
from CityTZ.services.city_service import CityService
from CityTZ.utils import format_json
from CityTZ.utils.logging import get_logger, set_log_level, configure_from_config

# Get a logger for this module
logger = get_logger(__name__)

CLI_CLIENT_KEY = 'cli'

TABLE_COLUMNS = ['City', 'Province', 'Country', 'Timezone', 'ISO2/ISO3', 'Lat', 'Lng']

# Apply the log level if specified in the command options
def apply_log_level(ctx, param, value):
    if value:
        set_log_level(value)
    return value

# Add an option for setting the log level to all commands
def log_level_option(f):
    return click.option('--log-level',
                      type=click.Choice(['debug', 'info', 'warning', 'error', 'critical'], case_sensitive=False),
                      callback=apply_log_level, expose_value=False, is_eager=True,
                      help='Set the logging level')(f)

def data_file_option(f):
    return click.option('--data-file', type=click.Path(dir_okay=False),
                        help='Path to cityMap.json (default: configured or bundled dataset)')(f)

# Filters, limit and output format shared by all query commands
def query_options(f):
    f = click.option('--timezone', help='Only show cities whose timezone contains this text')(f)
    f = click.option('--country', help='Only show cities whose country contains this text')(f)
    f = click.option('--limit', type=int, default=10, show_default=True,
                     help='Maximum number of results (0 for no limit)')(f)
    f = click.option('--output', 'output_format', type=click.Choice(['table', 'json'], case_sensitive=False),
                     default='table', show_default=True, help='Output format')(f)
    f = data_file_option(f)
    f = log_level_option(f)
    return f

def render_table(records: List[CityRecord]) -> str:
    """
    Render records as a fixed-width table.

    Returns:
        "No cities found." for an empty list, otherwise a count header
        followed by the table
    """
    if not records:
        return "No cities found."

    frame = pd.DataFrame(
        [
            [r.city, r.province, r.country, r.timezone, f"{r.iso2}/{r.iso3}", r.lat, r.lng]
            for r in records
        ],
        columns=TABLE_COLUMNS,
    )
    table = frame.to_string(index=False, float_format=lambda v: f"{v:.4f}")
    return f"Found {len(records)} cities:\n\n{table}"

def emit_results(records: List[CityRecord], output_format: str) -> None:
    if output_format.lower() == 'json':
        click.echo(format_json([record.to_dict() for record in records]))
    else:
        click.echo(render_table(records))

def run_query(method: str, *args, data_file=None, output_format='table', **kwargs) -> None:
    """
    Call a CityService query method and print its results.

    CityTZ errors are reported on stderr and end the command with exit code 1.
    """
    try:
        service = CityService(data_file=data_file)
        records = getattr(service, method)(*args, client_key=CLI_CLIENT_KEY, **kwargs)
    except CityTZError as e:
        logger.debug(f"{method} failed: {e.message}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    emit_results(records, output_format)

@click.group()
@click.version_option(__version__, prog_name='citytz')
def cli():
    """CityTZ CLI for looking up cities and their timezones."""
    pass

# Configuration commands group
@cli.group('config')
def config_group():
    """
    Manage CityTZ configuration.

    Commands for working with the configuration system, including viewing,
    creating, and validating configuration files.
    """
    pass

@config_group.command('show')
@click.option('--format', 'format_type', type=click.Choice(['yaml', 'json'], case_sensitive=False),
              default='yaml', help='Output format (yaml or json)')
@click.option('--section', help='Show only a specific configuration section')
@log_level_option
def show_config_command(format_type, section):
    """Display the current active configuration."""
    sys.exit(config_show(format_type, section))

@config_group.command('init')
@click.option('--output', 'output_path', help='Path where to create the configuration file')
@click.option('--force', is_flag=True, help='Overwrite an existing file without asking')
@log_level_option
def init_config_command(output_path, force):
    """Create a template configuration file with explanatory comments."""
    sys.exit(config_init(output_path, force))

@config_group.command('validate')
@click.argument('config_path')
@log_level_option
def validate_config_command(config_path):
    """Validate a configuration file."""
    sys.exit(config_validate(config_path))

@cli.command('city')
@click.argument('name')
@query_options
def city_command(name, timezone, country, limit, output_format, data_file):
    """Look up cities by exact name (case-insensitive)."""
    run_query('lookup_city', name, timezone=timezone, country=country, limit=limit,
              data_file=data_file, output_format=output_format)

@cli.command('search')
@click.argument('text')
@query_options
def search_command(text, timezone, country, limit, output_format, data_file):
    """
    Search by city, state, province or country.

    Every word of TEXT must appear, e.g. "springfield mo".
    """
    run_query('find_cities', text, timezone=timezone, country=country, limit=limit,
              data_file=data_file, output_format=output_format)

@cli.command('iso')
@click.argument('code')
@query_options
def iso_command(code, timezone, country, limit, output_format, data_file):
    """Find cities by ISO2 or ISO3 country code."""
    run_query('find_by_iso', code, timezone=timezone, country=country, limit=limit,
              data_file=data_file, output_format=output_format)

@cli.command('match')
@click.argument('query')
@click.option('--case-sensitive', is_flag=True, help='Compare without folding case')
@click.option('--exact', is_flag=True, help='Require a whole field to equal QUERY')
@query_options
def match_command(query, case_sensitive, exact, timezone, country, limit, output_format, data_file):
    """
    Match QUERY against name, ASCII name, state, province, country and ISO codes.

    A city matches if any one of those fields contains (or, with --exact,
    equals) QUERY.
    """
    max_length = get_config().get_validation_limits()['max_query_length']
    try:
        query = validate_query(query, max_length)
    except CityTZError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    run_query('search_cities', query, case_sensitive=case_sensitive, exact_match=exact,
              timezone=timezone, country=country, limit=limit,
              data_file=data_file, output_format=output_format)

@cli.command('all')
@query_options
def all_command(timezone, country, limit, output_format, data_file):
    """List cities in dataset order."""
    run_query('all_cities', timezone=timezone, country=country, limit=limit,
              data_file=data_file, output_format=output_format)

@cli.command('server')
@click.option('--host', type=str, default=None, help='The host to bind to (default: api.host)')
@click.option('--port', type=int, default=None, help='The port to bind to (default: api.port)')
@click.option('--debug/--no-debug', default=None, help='Enable debug mode')
@data_file_option
@log_level_option
def server_command(host, port, debug, data_file):
    """Start the CityTZ API server."""
    config = get_config()
    host = host or config.get("api.host", "0.0.0.0")
    port = port or config.get("api.port", 5000)
    if debug is None:
        debug = config.get("api.debug", False)

    logger.info(f"Starting CityTZ API server at {host}:{port}")
    try:
        start_server(host=host, port=port, data_file=data_file, debug=debug)
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

def main():
    """Main entry point for the CityTZ command-line interface."""
    # Load configuration before executing commands
    config = get_config()
    config.load_config()

    # Setup logging from configuration; --log-level overrides it per command
    configure_from_config(config)
    logger.debug("Configuration loaded successfully")

    cli()

if __name__ == '__main__':
    main()
