"""Deploy command: reconcile the web app (or slot) and push build outputs to it."""

import logging
import os
import sys

from appdock.config import load_config
from appdock.deploy import DeployError, DeployParams, deploy
from appdock.redact import register_secret

logger = logging.getLogger(__name__)

ACCESS_TOKEN_ENV = "AZURE_ACCESS_TOKEN"


def handle_deploy(args):
    """Handle the deploy command."""
    try:
        config = load_config(args.config, profile=args.profile)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    access_token = args.access_token or os.environ.get(ACCESS_TOKEN_ENV, "")
    register_secret(access_token)
    if not access_token and not args.dry_run:
        logger.error(f"Error: an access token is required (--access-token or ${ACCESS_TOKEN_ENV}).")
        sys.exit(1)

    params = DeployParams(
        config=config,
        stop_app_during_deployment=args.stop_app or config.stop_app_during_deployment,
        build_final_name=args.build_final_name,
        dry_run=args.dry_run,
    )

    target = config.app_name
    if config.deployment_slot_name:
        target = f"{config.app_name}/{config.deployment_slot_name}"
    logger.info(f"Deploying to {target} ({config.resource_group})")

    try:
        deploy(params, access_token)
    except (DeployError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


def register_deploy_command(subparsers):
    """Register the deploy subcommand."""
    parser = subparsers.add_parser("deploy", help="Deploy build outputs to an App Service web app or slot")
    parser.add_argument("--config", required=True, help="Path to appdock.yaml (or the directory holding it)")
    parser.add_argument("--profile", default=None, help="Config profile to merge over the base (e.g. staging)")
    parser.add_argument(
        "--stop-app",
        action="store_true",
        help="Stop the app before deploying and start it afterwards",
    )
    parser.add_argument(
        "--build-final-name",
        default=None,
        help="Build final name; selects <name>.jar among several jars on Java SE",
    )
    parser.add_argument(
        "--access-token",
        default=None,
        help=f"Azure Resource Manager bearer token (default: ${ACCESS_TOKEN_ENV})",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print API calls without executing")
    parser.set_defaults(func=handle_deploy)
