#!/usr/bin/env python3
"""
Example showing how to run the CityTZ module as an API server.

This script starts a Flask server that provides REST API endpoints
for looking up cities and their timezones.
"""
import argparse

from CityTZ import start_server
from CityTZ.utils.logging import get_logger, set_log_level

# Configure logging
set_log_level('info')
logger = get_logger(__name__, {"component": "api_example"})

def main():
    """Main entry point for the API server example."""
    parser = argparse.ArgumentParser(description='CityTZ API Server')
    parser.add_argument('--host', default='localhost', help='Host to listen on')
    parser.add_argument('--port', type=int, default=5001, help='Port to listen on')
    parser.add_argument('--data-file', help='Path to cityMap.json')
    parser.add_argument('--debug', action='store_true', help='Run in debug mode')

    args = parser.parse_args()

    logger.info(f"API will be available at http://{args.host}:{args.port}")
    print("Press Ctrl+C to stop the server")

    start_server(
        host=args.host,
        port=args.port,
        data_file=args.data_file,
        debug=args.debug
    )

if __name__ == '__main__':
    main()
