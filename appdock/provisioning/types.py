"""Shared data types for the App Service client and side channels."""

import os
from dataclasses import dataclass, field
from enum import Enum

JAVA_SE = "java se"
DOCKER = "docker"


class DeployType(str, Enum):
    """Artifact types understood by the OneDeploy API."""

    JAR = "jar"
    WAR = "war"
    EAR = "ear"
    ZIP = "zip"
    STARTUP = "startup"
    STATIC = "static"
    LIB = "lib"

    @classmethod
    def from_value(cls, value: str) -> "DeployType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            available = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown deploy type '{value}'. Available types: {available}") from None

    @classmethod
    def from_file(cls, path) -> "DeployType":
        """Infer the deploy type from a file extension; unknown extensions are static files."""
        ext = os.path.splitext(str(path))[1].lower().lstrip(".")
        return _EXTENSION_TYPES.get(ext, cls.STATIC)


_EXTENSION_TYPES = {
    "jar": DeployType.JAR,
    "war": DeployType.WAR,
    "ear": DeployType.EAR,
    "zip": DeployType.ZIP,
}


class ProviderError(Exception):
    """Failure reported by the management plane, Kudu, or the FTP side channel."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class RuntimeInfo:
    """Runtime descriptor of a remote app as reported by the provider."""

    os: str = ""
    web_container: str = ""
    java_version: str = ""
    image: str = ""

    @property
    def is_docker(self) -> bool:
        return self.os.lower() == DOCKER

    @property
    def is_java_se(self) -> bool:
        return self.web_container.lower().startswith(JAVA_SE)


@dataclass
class HostingResource:
    """Handle to a remote web app or one of its deployment slots."""

    subscription_id: str
    resource_group: str
    app_name: str
    slot_name: str | None = None
    exists: bool = False
    runtime: RuntimeInfo = field(default_factory=RuntimeInfo)
    host_name: str = ""
    state: str = "Unknown"
    region: str = ""

    @property
    def is_slot(self) -> bool:
        return self.slot_name is not None

    @property
    def name(self) -> str:
        """Display name: ``app`` or ``app/slot``."""
        return f"{self.app_name}/{self.slot_name}" if self.is_slot else self.app_name

    @property
    def resource_id(self) -> str:
        """ARM resource id of the app or slot."""
        rid = (
            f"/subscriptions/{self.subscription_id}/resourceGroups/{self.resource_group}"
            f"/providers/Microsoft.Web/sites/{self.app_name}"
        )
        if self.is_slot:
            rid += f"/slots/{self.slot_name}"
        return rid


@dataclass
class RuntimeConfig:
    """Provider-native runtime record consumed by create-or-update."""

    os: str | None = None
    web_container: str | None = None
    java_version: str | None = None
    image: str | None = None
    registry_url: str | None = None
    username: str | None = None
    password: str | None = None
    startup_command: str | None = None


@dataclass
class DiagnosticConfig:
    """App Service logging configuration."""

    web_server_logging: bool = False
    retention_mb: int = 35
    retention_days: int = 7
    application_logging_level: str | None = None  # Error | Warning | Information | Verbose


@dataclass
class AppServiceConfig:
    """Everything create-or-update needs to converge the base web app."""

    subscription_id: str
    resource_group: str
    app_name: str
    region: str = "westeurope"
    pricing_tier: str = "P1v2"
    service_plan_name: str = ""
    service_plan_resource_group: str = ""
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    app_settings: dict[str, str] = field(default_factory=dict)
    diagnostic_config: DiagnosticConfig | None = None


class SlotSourceKind(str, Enum):
    NEW = "new"
    PARENT = "parent"
    SLOT = "slot"


@dataclass
class SlotConfigSource:
    """Where a new deployment slot copies its configuration from."""

    kind: SlotSourceKind
    slot: HostingResource | None = None  # set when kind is SLOT


@dataclass
class PublishingProfile:
    """FTP publishing endpoint and credentials of an app or slot."""

    ftp_url: str
    username: str
    password: str

    @property
    def host(self) -> str:
        return self.ftp_url.split("://", 1)[-1].split("/", 1)[0]

    @property
    def root(self) -> str:
        """Remote directory the publish URL points at (e.g. ``/site/wwwroot``)."""
        rest = self.ftp_url.split("://", 1)[-1]
        return "/" + rest.split("/", 1)[1] if "/" in rest else "/"
