"""Transfer strategy selection and execution.

Explicitly typed artifacts always go first, one OneDeploy call each. The
remaining (untyped) artifacts are moved with exactly one strategy, picked in
strict precedence:

1. SINGLE    - exactly one artifact, deployed directly, no packaging
2. MULTI_WAR - every artifact is a .war, each deployed to its own path
3. ZIP       - anything else, staged and zipped into one atomic zip deploy
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from appdock.config.types import Artifact
from appdock.deploy.errors import TransferError
from appdock.provisioning.types import DeployType, HostingResource, ProviderError

logger = logging.getLogger(__name__)


class TransferStrategy(str, Enum):
    TYPED = "typed"
    SINGLE = "single"
    MULTI_WAR = "multi_war"
    ZIP = "zip"


@dataclass
class TransferPlan:
    """Typed artifacts to push first, then the strategy for the rest."""

    typed: list[Artifact] = field(default_factory=list)
    untyped: list[Artifact] = field(default_factory=list)
    strategy: TransferStrategy | None = None

    @property
    def strategies(self) -> list[TransferStrategy]:
        """Strategies this plan runs, in execution order."""
        result = [TransferStrategy.TYPED] if self.typed else []
        if self.strategy is not None:
            result.append(self.strategy)
        return result


def select_strategy(untyped: list[Artifact]) -> TransferStrategy | None:
    """Pick the strategy for untyped artifacts; None when there are none."""
    if not untyped:
        return None
    if len(untyped) == 1:
        return TransferStrategy.SINGLE
    if all(a.is_war for a in untyped):
        return TransferStrategy.MULTI_WAR
    return TransferStrategy.ZIP


def plan_transfers(artifacts: list[Artifact]) -> TransferPlan:
    """Split artifacts into typed/untyped and pick the untyped strategy. Pure."""
    typed = [a for a in artifacts if a.type is not None]
    untyped = [a for a in artifacts if a.type is None]
    return TransferPlan(typed=typed, untyped=untyped, strategy=select_strategy(untyped))


def _deploy_file(client, resource, deploy_type: DeployType, artifact: Artifact):
    try:
        client.deploy_file(resource, deploy_type, artifact.file, artifact.path)
    except ProviderError as e:
        raise TransferError(f"Failed to deploy {artifact.file} to {resource.name}: {e}") from e


def execute_plan(client, resource: HostingResource, plan: TransferPlan, packager):
    """Run *plan* against *resource*. *packager* is only touched by the ZIP strategy."""
    for artifact in plan.typed:
        _deploy_file(client, resource, artifact.type, artifact)

    if plan.strategy is None:
        return

    if plan.strategy in (TransferStrategy.SINGLE, TransferStrategy.MULTI_WAR):
        for artifact in plan.untyped:
            _deploy_file(client, resource, DeployType.from_file(artifact.file), artifact)
        return

    zip_file = packager.package(plan.untyped)
    try:
        client.zip_deploy(resource, zip_file)
    except ProviderError as e:
        raise TransferError(f"Failed to zip deploy to {resource.name}: {e}") from e


def deploy_artifacts(client, resource: HostingResource, artifacts: list[Artifact], packager):
    """Plan and execute artifact transfers. Returns the executed plan."""
    plan = plan_transfers(artifacts)
    if not plan.strategies:
        logger.info("No artifacts to deploy.")
    else:
        logger.info(f"Transfer strategies: {', '.join(s.value for s in plan.strategies)}")
    execute_plan(client, resource, plan, packager)
    return plan
