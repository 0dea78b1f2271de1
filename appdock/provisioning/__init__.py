"""App Service provisioning: resource types, ARM client, FTP side channel."""

from appdock.provisioning.arm import ArmClient
from appdock.provisioning.ftp import FtpUploader
from appdock.provisioning.types import (
    AppServiceConfig,
    DeployType,
    DiagnosticConfig,
    HostingResource,
    ProviderError,
    PublishingProfile,
    RuntimeConfig,
    RuntimeInfo,
    SlotConfigSource,
    SlotSourceKind,
)

__all__ = [
    "AppServiceConfig",
    "ArmClient",
    "DeployType",
    "DiagnosticConfig",
    "FtpUploader",
    "HostingResource",
    "ProviderError",
    "PublishingProfile",
    "RuntimeConfig",
    "RuntimeInfo",
    "SlotConfigSource",
    "SlotSourceKind",
]
