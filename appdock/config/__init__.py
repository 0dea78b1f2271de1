"""Config loading and types."""

from appdock.config.loader import deep_merge, load_config, load_raw_config
from appdock.config.types import (
    Artifact,
    DeploymentResource,
    DockerSpec,
    RuntimeSpec,
    WebAppConfig,
)

__all__ = [
    "Artifact",
    "DeploymentResource",
    "DockerSpec",
    "RuntimeSpec",
    "WebAppConfig",
    "deep_merge",
    "load_config",
    "load_raw_config",
]
