"""Deploy library: reconciliation, transfer strategies, staging, lifecycle."""

from appdock.deploy.errors import (
    ConfigurationError,
    DeployError,
    PackagingError,
    ResourceError,
    TransferError,
)
from appdock.deploy.lifecycle import deploy_to_resource, lifecycle_guard
from appdock.deploy.orchestrate import deploy, run_deploy
from appdock.deploy.params import DeployParams
from appdock.deploy.reconcile import reconcile_resource, resolve_slot_source
from appdock.deploy.runtime import build_app_service_config, build_runtime_config
from appdock.deploy.staging import StagingPackager
from appdock.deploy.strategy import (
    TransferPlan,
    TransferStrategy,
    deploy_artifacts,
    plan_transfers,
    select_strategy,
)
from appdock.deploy.telemetry import Telemetry

__all__ = [
    "ConfigurationError",
    "DeployError",
    "DeployParams",
    "PackagingError",
    "ResourceError",
    "StagingPackager",
    "Telemetry",
    "TransferError",
    "TransferPlan",
    "TransferStrategy",
    "build_app_service_config",
    "build_runtime_config",
    "deploy",
    "deploy_artifacts",
    "deploy_to_resource",
    "lifecycle_guard",
    "plan_transfers",
    "reconcile_resource",
    "resolve_slot_source",
    "run_deploy",
    "select_strategy",
]
