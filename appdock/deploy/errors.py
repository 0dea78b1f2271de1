"""Deploy error taxonomy. None of these are retried."""


class DeployError(Exception):
    """Base class for failures surfaced by a deploy run."""


class ConfigurationError(DeployError):
    """Desired state can't be applied: missing parent app, missing source slot."""


class ResourceError(DeployError):
    """Provider failure while looking up, creating or updating the hosting resource."""


class PackagingError(DeployError):
    """Filesystem failure while staging or zipping artifacts."""


class TransferError(DeployError):
    """Failure while transferring artifacts or external resources."""
