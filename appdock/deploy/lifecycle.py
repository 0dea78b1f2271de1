"""Deploy phase with stop-before / start-after lifecycle handling."""

import logging
from contextlib import contextmanager

from appdock.config.types import WebAppConfig
from appdock.deploy.errors import ResourceError
from appdock.deploy.external import sync_external_resources
from appdock.deploy.staging import StagingPackager
from appdock.deploy.strategy import deploy_artifacts
from appdock.provisioning.types import HostingResource, ProviderError

logger = logging.getLogger(__name__)


@contextmanager
def lifecycle_guard(client, resource: HostingResource, stop_first=False):
    """Optionally stop *resource*, run the body, and always start it afterwards.

    If the body (or the stop) failed and the start fails too, the start
    failure is logged and the original error propagates.
    """
    failed = False
    try:
        if stop_first:
            try:
                client.stop(resource)
            except ProviderError as e:
                raise ResourceError(f"Failed to stop {resource.name}: {e}") from e
        yield resource
    except BaseException:
        failed = True
        raise
    finally:
        try:
            client.start(resource)
        except ProviderError as e:
            if not failed:
                raise ResourceError(f"Failed to start {resource.name}: {e}") from e
            logger.error(f"Failed to start {resource.name} after a failed deploy: {e}")


def deploy_to_resource(
    client,
    channel,
    resource: HostingResource,
    config: WebAppConfig,
    stop_app_during_deployment=False,
    build_final_name=None,
) -> bool:
    """Deploy artifacts then external resources. Returns False when skipped (docker apps)."""
    if resource.runtime.is_docker:
        logger.info("Skip deployment for docker app service")
        return False

    logger.info(f"Trying to deploy artifact to {config.app_name}...")
    with lifecycle_guard(client, resource, stop_first=stop_app_during_deployment):
        packager = StagingPackager(config.app_name, build_final_name, java_se=resource.runtime.is_java_se)
        deploy_artifacts(client, resource, config.artifacts, packager)
        sync_external_resources(channel, resource, config.resources)
        logger.info(f"Successfully deployed the artifact to https://{resource.host_name}")
    return True
