#!/usr/bin/env python3
"""medmap API server"""

import argparse

from medmap import MindMapAPIServer


def parse_arguments():
    """ArgParse argument parsing"""
    parser = argparse.ArgumentParser(description="medmap server application")

    parser.add_argument(
        "-l", "--listen", type=str, default="localhost", help="Hostname/IP to listen on"
    )
    parser.add_argument(
        "-p", "--port", type=int, default=13337, help="Port to listen on"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", default=False, help="Werkzeug debug mode"
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config JSON file (defaults to $CONFIG_PATH, then built-in defaults)",
    )

    return parser.parse_args()


def start():
    """Meant to be used by Gunicorn"""
    return MindMapAPIServer().app


if __name__ == "__main__":
    cli_args = parse_arguments()
    MindMapAPIServer("medmap", cli_args.config).app.run(
        host=cli_args.listen, port=cli_args.port, debug=cli_args.debug
    )
