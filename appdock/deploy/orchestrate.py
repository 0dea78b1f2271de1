"""Deploy orchestration: run_deploy, deploy."""

import logging

from appdock.deploy.lifecycle import deploy_to_resource
from appdock.deploy.params import DeployParams
from appdock.deploy.reconcile import reconcile_resource
from appdock.deploy.telemetry import Telemetry
from appdock.provisioning.arm import ArmClient
from appdock.provisioning.ftp import FtpUploader
from appdock.provisioning.types import HostingResource

logger = logging.getLogger(__name__)


def run_deploy(client, channel, params: DeployParams, telemetry: Telemetry | None = None) -> HostingResource:
    """Shared deploy orchestration.

    Args:
        client: App Service client (lookups, create/update, lifecycle, deploys).
        channel: file transfer side channel with ``push(resource, files)``.
        params: resolved DeployParams.
        telemetry: optional sink for run properties.

    Returns:
        The reconciled hosting resource.

    Raises:
        DeployError: the first failure; the resource is started again if the
            deploy phase was entered.
    """
    config = params.config
    target = reconcile_resource(client, config, telemetry)
    deploy_to_resource(
        client,
        channel,
        target,
        config,
        stop_app_during_deployment=params.stop_app_during_deployment,
        build_final_name=params.build_final_name,
    )
    return target


def deploy(params: DeployParams, access_token) -> HostingResource:
    """Deploy to Azure App Service with a fresh ARM client. Single entry point."""
    with ArmClient(access_token, dry_run=params.dry_run) as client:
        channel = FtpUploader(client, dry_run=params.dry_run)
        return run_deploy(client, channel, params)
