"""Configuration key operator."""

import logging

from hostsync.models.gsetting import GSetting
from hostsync.operators.base import Operator
from hostsync.utils.shell import CommandResult

logger = logging.getLogger(__name__)


class GSettingOperator(Operator):
    """Operator writing GSettings keys with the gsettings CLI."""

    command = "gsettings"
    timeout = 30.0

    def set(self, setting: GSetting) -> CommandResult:
        """Set a key to its GVariant value."""
        logger.info("Setting %s to %s", setting.id, setting.value)
        return self.run(["gsettings", "set", setting.schema, setting.key, setting.value])
