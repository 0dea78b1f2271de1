"""Deploy parameters dataclass."""

from dataclasses import dataclass

from appdock.config.types import WebAppConfig


@dataclass
class DeployParams:
    """All parameters needed for a single deployment."""

    config: WebAppConfig
    stop_app_during_deployment: bool = False
    build_final_name: str | None = None  # picks the executable jar on Java SE
    dry_run: bool = False
