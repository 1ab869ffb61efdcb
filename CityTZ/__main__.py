#!/usr/bin/env python3
"""
Main entry point for the CityTZ package when run as a module.

This module provides the entry point for running the CityTZ package as a module
using `python -m CityTZ`. It delegates to the CLI's main function.

Example:
    $ python -m CityTZ city Chicago
    $ python -m CityTZ search "springfield mo"
    $ python -m CityTZ iso DE --limit 5
    $ python -m CityTZ all --timezone America/New_York --output json
"""

from CityTZ.cli.commands import main

if __name__ == "__main__":
    main()
