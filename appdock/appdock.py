#!/usr/bin/env python3
"""App Service deploy tools: CLI entrypoint."""

import argparse

from appdock.commands.deploy import register_deploy_command
from appdock.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="App Service deploy tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging()
    args.func(args)


if __name__ == "__main__":
    main()
