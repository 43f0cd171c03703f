"""Unit tests for the desktop extension component."""

from unittest.mock import MagicMock

from hostsync.components.extension import ExtensionComponent
from hostsync.core.plan import ExecuteContext, PlanContext, Verb
from hostsync.models.extension import ExtensionItem
from hostsync.utils.shell import CommandResult


class TestExtensionSync:
    """Tests for extension sync planning."""

    def test_install_then_toggle(
        self, plan_context: PlanContext, static_scanner, write_json, ok_result: CommandResult
    ) -> None:
        """Missing extensions are installed and their state set; changed ones toggled."""
        write_json(
            plan_context.user_manifest_path("gnome-extensions.json"),
            {
                "extensions": [
                    "new@example.com",
                    {"id": "off@example.com", "enabled": False},
                    "same@example.com",
                ]
            },
        )
        scanner = static_scanner(
            [ExtensionItem(uuid="off@example.com"), ExtensionItem(uuid="same@example.com")]
        )
        operator = MagicMock()
        for method in (operator.install, operator.enable, operator.disable):
            method.return_value = ok_result
        component = ExtensionComponent(plan_context, scanner=scanner, operator=operator)

        plan = component.plan_sync()

        assert [(op.verb, op.target) for op in plan.describe().operations] == [
            (Verb.INSTALL, "extension:new@example.com"),
            (Verb.ENABLE, "extension:new@example.com"),
            (Verb.DISABLE, "extension:off@example.com"),
        ]
        assert plan.execute(ExecuteContext()).all_succeeded
        operator.disable.assert_called_once_with("off@example.com")
