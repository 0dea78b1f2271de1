"""Resource reconciliation: create or update the web app, or one of its slots."""

import logging

from appdock.config.types import WebAppConfig
from appdock.deploy.errors import ConfigurationError, ResourceError
from appdock.deploy.runtime import build_app_service_config
from appdock.deploy.telemetry import Telemetry
from appdock.provisioning.types import (
    HostingResource,
    ProviderError,
    SlotConfigSource,
    SlotSourceKind,
)

logger = logging.getLogger(__name__)

WEBAPP_NOT_EXIST_FOR_SLOT = (
    "The web app '{app}' does not exist. A deployment slot can only be created in an existing web app."
)
CONFIGURATION_SOURCE_DOES_NOT_EXIST = "Configuration source slot '{source}' does not exist in web app '{app}'"
FAILED_TO_GET_CONFIGURATION_SOURCE = "Failed to get configuration source slot '{source}'"
CREATE_NEW_DEPLOYMENT_SLOT = "createNewDeploymentSlot"


def resolve_slot_source(client, app: HostingResource, configuration_source) -> SlotConfigSource:
    """Map the configured source string to a SlotConfigSource.

    Unset or empty means "parent". Anything other than "new"/"parent" names
    a sibling slot, which must exist.
    """
    source = (configuration_source or "").strip()
    if not source or source.lower() == SlotSourceKind.PARENT.value:
        return SlotConfigSource(kind=SlotSourceKind.PARENT)
    if source.lower() == SlotSourceKind.NEW.value:
        return SlotConfigSource(kind=SlotSourceKind.NEW)

    try:
        sibling = client.lookup_slot(app, source)
    except ProviderError as e:
        raise ResourceError(FAILED_TO_GET_CONFIGURATION_SOURCE.format(source=source)) from e
    if sibling is None:
        raise ConfigurationError(CONFIGURATION_SOURCE_DOES_NOT_EXIST.format(source=source, app=app.app_name))
    return SlotConfigSource(kind=SlotSourceKind.SLOT, slot=sibling)


def create_deployment_slot(client, app: HostingResource, config: WebAppConfig, telemetry: Telemetry) -> HostingResource:
    """Create the configured slot under *app*, then refresh both handles."""
    name = config.deployment_slot_name
    source = resolve_slot_source(client, app, config.deployment_slot_configuration_source)

    logger.info(f"Creating deployment slot {name} in web app {config.app_name}")
    telemetry.add_default_property(CREATE_NEW_DEPLOYMENT_SLOT, True)
    slot = client.create_slot(
        app,
        name,
        source,
        app_settings=config.app_settings or None,
        diagnostic_config=config.diagnostic_config,
    )
    client.refresh(slot)
    client.refresh(app)
    logger.info("Successfully created the deployment slot.")
    return slot


def update_deployment_slot(client, slot: HostingResource, config: WebAppConfig) -> HostingResource:
    """Placeholder: existing slots are deployed to as they are.

    App settings and diagnostic config are only applied when a slot is
    created; updating them on an existing slot is not supported yet.
    """
    logger.debug(f"Deployment slot {slot.name} exists; leaving its configuration unchanged.")
    return slot


def reconcile_resource(client, config: WebAppConfig, telemetry: Telemetry | None = None) -> HostingResource:
    """Return a live handle for the app (or slot) described by *config*."""
    telemetry = telemetry or Telemetry()
    try:
        if not config.deployment_slot_name:
            return client.create_or_update_app(build_app_service_config(config))

        app = client.lookup_app(config.subscription_id, config.resource_group, config.app_name)
        if app is None or not app.exists:
            raise ConfigurationError(WEBAPP_NOT_EXIST_FOR_SLOT.format(app=config.app_name))

        slot = client.lookup_slot(app, config.deployment_slot_name)
        if slot is not None and slot.exists:
            return update_deployment_slot(client, slot, config)
        return create_deployment_slot(client, app, config, telemetry)
    except ProviderError as e:
        raise ResourceError(f"Failed to reconcile web app '{config.app_name}': {e}") from e
