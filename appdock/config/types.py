"""Web app configuration dataclasses."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from appdock.provisioning.types import DeployType, DiagnosticConfig

DOCKER_PASSWORD_ENV = "DOCKER_REGISTRY_PASSWORD"


@dataclass
class RuntimeSpec:
    """Language runtime of the app: OS family, Java version, web container."""

    os: str = "linux"
    java_version: str = ""
    web_container: str = ""

    @property
    def is_docker(self) -> bool:
        return self.os.lower() == "docker"


@dataclass
class DockerSpec:
    """Container image and registry credentials."""

    image: str = ""
    registry_url: str = ""
    username: str = ""
    password: str = ""
    startup_command: str = ""


@dataclass
class Artifact:
    """One build output to deploy, with an optional explicit deploy type."""

    file: Path
    path: str = ""
    type: DeployType | None = None

    @property
    def deploy_type(self) -> DeployType:
        """Explicit type, or the one inferred from the file extension."""
        return self.type or DeployType.from_file(self.file)

    @property
    def is_war(self) -> bool:
        return self.deploy_type == DeployType.WAR


@dataclass
class DeploymentResource:
    """A directory of auxiliary files with include/exclude globs."""

    directory: Path
    target_path: str = ""
    includes: list[str] = field(default_factory=lambda: ["**/*"])
    excludes: list[str] = field(default_factory=list)
    external: bool = False

    @property
    def is_external(self) -> bool:
        return self.external


@dataclass
class WebAppConfig:
    """Desired state of the web app (and optional deployment slot)."""

    subscription_id: str
    resource_group: str
    app_name: str
    region: str = "westeurope"
    pricing_tier: str = "P1v2"
    service_plan_name: str = ""
    service_plan_resource_group: str = ""
    runtime: RuntimeSpec | None = None
    docker: DockerSpec | None = None
    app_settings: dict[str, str] = field(default_factory=dict)
    deployment_slot_name: str | None = None
    deployment_slot_configuration_source: str | None = None
    diagnostic_config: DiagnosticConfig | None = None
    stop_app_during_deployment: bool = False
    artifacts: list[Artifact] = field(default_factory=list)
    resources: list[DeploymentResource] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict, base_dir=".") -> "WebAppConfig":
        """Build a WebAppConfig from a (post-merge) config dict.

        Relative artifact and resource paths are resolved against *base_dir*.
        """
        for key in ("subscription_id", "resource_group", "app_name"):
            if not d.get(key):
                raise ValueError(f"Config is missing '{key}' field")

        base = Path(base_dir)

        runtime_dict = d.get("runtime")
        runtime = RuntimeSpec(**_stringify(runtime_dict)) if runtime_dict is not None else None
        docker_dict = d.get("docker")
        docker = DockerSpec(**_stringify(docker_dict)) if docker_dict is not None else None
        if docker is not None and not docker.password:
            docker.password = os.environ.get(DOCKER_PASSWORD_ENV, "")
        _validate_runtime(runtime, docker)

        plan = d.get("app_service_plan", {})
        slot = d.get("deployment_slot") or {}
        diag_dict = d.get("diagnostics")

        artifacts = [_artifact_from_dict(a, base) for a in d.get("artifacts", [])]
        resources = [
            DeploymentResource(
                directory=base / r["directory"],
                target_path=r.get("target_path", ""),
                includes=r.get("includes", ["**/*"]),
                excludes=r.get("excludes", []),
                external=r.get("external", False),
            )
            for r in d.get("resources", [])
        ]

        return cls(
            subscription_id=d["subscription_id"],
            resource_group=d["resource_group"],
            app_name=d["app_name"],
            region=d.get("region", "westeurope"),
            pricing_tier=d.get("pricing_tier", "P1v2"),
            service_plan_name=plan.get("name", ""),
            service_plan_resource_group=plan.get("resource_group", ""),
            runtime=runtime,
            docker=docker,
            app_settings={str(k): str(v) for k, v in (d.get("app_settings") or {}).items()},
            deployment_slot_name=slot.get("name"),
            deployment_slot_configuration_source=slot.get("configuration_source"),
            diagnostic_config=DiagnosticConfig(**diag_dict) if diag_dict is not None else None,
            stop_app_during_deployment=d.get("stop_app_during_deployment", False),
            artifacts=artifacts,
            resources=resources,
        )


def _stringify(d):
    """YAML turns ``java_version: 11`` into an int; runtime fields are strings."""
    return {k: "" if v is None else str(v) for k, v in d.items()}


def _validate_runtime(runtime, docker):
    """Exactly one of runtime/docker must be resolvable from the OS family."""
    if runtime is None:
        raise ValueError("Config is missing 'runtime' field")
    if runtime.is_docker and (docker is None or not docker.image):
        raise ValueError("runtime.os is 'docker' but no 'docker.image' is configured")
    if docker is not None and not runtime.is_docker:
        raise ValueError(f"'docker' settings require runtime.os 'docker' (got '{runtime.os}')")


def _artifact_from_dict(a, base):
    if "file" not in a:
        raise ValueError(f"Artifact entry is missing 'file' field: {a}")
    explicit = a.get("type")
    return Artifact(
        file=base / a["file"],
        path=a.get("path") or "",
        type=DeployType.from_value(explicit) if explicit else None,
    )
