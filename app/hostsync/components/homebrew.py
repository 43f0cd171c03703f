"""Homebrew formulae subsystem."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from hostsync.components.base import Component, expect_success
from hostsync.core.drift import DriftReport
from hostsync.core.plan import Operation, OperationPlan, PlanWarning, Verb
from hostsync.models.homebrew import BrewFormula, HomebrewManifest
from hostsync.operators.homebrew import HomebrewOperator
from hostsync.scanners.homebrew import HomebrewScanner

logger = logging.getLogger(__name__)


class HomebrewSyncPlan(OperationPlan[BrewFormula | str]):
    """Adds missing taps, then installs formulae."""

    title = "Homebrew sync"

    def __init__(
        self,
        steps: Sequence[tuple[Operation, BrewFormula | str]],
        operator: HomebrewOperator,
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        super().__init__(steps, warnings)
        self._operator = operator

    def apply(self, operation: Operation, item: BrewFormula | str) -> str | None:
        match operation.verb, item:
            case Verb.CONFIGURE, str():
                return expect_success(self._operator.tap(item), f"tap {item}")
            case Verb.INSTALL, BrewFormula():
                return expect_success(
                    self._operator.install(item), f"install {item.install_name}"
                )
            case _:
                msg = f"Unsupported Homebrew operation: {operation.verb.value}"
                raise ValueError(msg)


class HomebrewComponent(Component[BrewFormula, HomebrewManifest]):
    """Homebrew formulae, compared by short name."""

    id = "homebrew"
    name = "Homebrew"
    manifest_file = "homebrew.json"
    manifest_model = HomebrewManifest

    scanner: HomebrewScanner
    operator: HomebrewOperator

    def default_scanner(self) -> HomebrewScanner:
        return HomebrewScanner()

    def default_operator(self) -> HomebrewOperator:
        return HomebrewOperator()

    def build_sync_plan(
        self, report: DriftReport[BrewFormula], manifest: HomebrewManifest
    ) -> HomebrewSyncPlan:
        steps: list[tuple[Operation, BrewFormula | str]] = []

        required = manifest.required_taps()
        if required:
            configured = set(self.scanner.list_taps())
            for tap in required:
                if tap not in configured:
                    steps.append((Operation(Verb.CONFIGURE, f"{self.id}:tap:{tap}"), tap))

        for formula in report.to_install:
            steps.append(
                (Operation(Verb.INSTALL, self.target(formula), formula.install_name), formula)
            )

        return HomebrewSyncPlan(steps, self.operator)
