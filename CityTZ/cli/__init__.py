"""
Command-line interface module for the CityTZ package.

This module provides a command-line interface for interacting with the CityTZ
package functionality. It includes commands for exact city lookup, multi-term
search, country-code lookup, the generic matcher and configuration management.

Key Components:
- main: Main entry point for the CLI
- cli: The click command group
"""

from CityTZ.cli.commands import cli, main

__all__ = ['cli', 'main']
