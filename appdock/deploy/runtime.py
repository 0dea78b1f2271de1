"""Map runtime/docker specs to the provider-native runtime record."""

from appdock.config.types import DockerSpec, RuntimeSpec, WebAppConfig
from appdock.provisioning.types import AppServiceConfig, RuntimeConfig


def build_runtime_config(runtime: RuntimeSpec | None, docker: DockerSpec | None) -> RuntimeConfig:
    """Copy runtime fields, then overlay docker fields. No conflict checks here."""
    config = RuntimeConfig()
    if runtime is not None:
        config.web_container = runtime.web_container
        config.java_version = runtime.java_version
        config.os = runtime.os
    if docker is not None:
        config.image = docker.image
        config.registry_url = docker.registry_url
        config.username = docker.username
        config.password = docker.password
        config.startup_command = docker.startup_command
    return config


def build_app_service_config(config: WebAppConfig) -> AppServiceConfig:
    """Desired state handed to the create-or-update collaborator."""
    return AppServiceConfig(
        subscription_id=config.subscription_id,
        resource_group=config.resource_group,
        app_name=config.app_name,
        region=config.region,
        pricing_tier=config.pricing_tier,
        service_plan_name=config.service_plan_name,
        service_plan_resource_group=config.service_plan_resource_group,
        runtime=build_runtime_config(config.runtime, config.docker),
        app_settings=dict(config.app_settings),
        diagnostic_config=config.diagnostic_config,
    )
