"""Fire-and-forget telemetry properties attached to a deploy run."""

import logging

logger = logging.getLogger(__name__)


class Telemetry:
    """Collects default properties; nothing here may fail a deploy."""

    def __init__(self):
        self.properties: dict[str, str] = {}

    def add_default_property(self, key, value):
        self.properties[key] = str(value)
        logger.debug(f"telemetry: {key}={value}")
