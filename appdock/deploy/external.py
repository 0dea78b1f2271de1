"""Push external (non-artifact) resources through the FTP side channel."""

import fnmatch
import logging
import posixpath

from appdock.config.types import DeploymentResource
from appdock.deploy.errors import TransferError
from appdock.provisioning.types import HostingResource, ProviderError

logger = logging.getLogger(__name__)


def collect_files(resource: DeploymentResource):
    """List ``(local_path, remote_relative_path)`` pairs matched by the resource's globs."""
    root = resource.directory
    if not root.is_dir():
        raise TransferError(f"Resource directory not found: {root}")

    matched = set()
    for pattern in resource.includes:
        matched.update(p for p in root.glob(pattern) if p.is_file())

    files = []
    for path in sorted(matched):
        rel = path.relative_to(root).as_posix()
        if any(fnmatch.fnmatch(rel, ex) for ex in resource.excludes):
            continue
        remote = posixpath.join(resource.target_path.strip("/"), rel) if resource.target_path else rel
        files.append((path, remote))
    return files


def sync_external_resources(channel, target: HostingResource, resources: list[DeploymentResource]):
    """Upload every external resource to *target*; no-op when there are none."""
    external = [r for r in resources if r.is_external]
    if not external:
        return

    files = []
    for resource in external:
        files.extend(collect_files(resource))
    logger.info(f"Syncing {len(files)} external file(s) to {target.name}...")
    try:
        channel.push(target, files)
    except ProviderError as e:
        raise TransferError(f"Failed to upload external resources to {target.name}: {e}") from e
