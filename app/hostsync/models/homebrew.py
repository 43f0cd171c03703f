"""Homebrew formula models.

The homebrew.json manifest lists formulae, either as plain names or as
objects naming the tap they come from, plus taps to add:

    {
      "formulae": ["lefthook", "valkyrie00/bbrew/bbrew", {"name": "k9s", "tap": "derailed/k9s"}],
      "taps": ["homebrew/cask-fonts"]
    }

A ``user/repo/formula`` name implies the ``user/repo`` tap.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field

from hostsync.core.manifest import ItemManifest, sorted_unique
from hostsync.core.resource import Resource, merge_by_identity


@dataclass(frozen=True, slots=True)
class BrewFormula(Resource):
    """An installed or declared formula.

    Attributes:
        name: Formula name, optionally fully qualified ('user/repo/formula').
        tap: Tap to install from, if not implied by the name.
    """

    name: str
    tap: str | None = None

    def __post_init__(self) -> None:
        """Validate formula data after initialization."""
        if not self.name:
            msg = "Formula name cannot be empty"
            raise ValueError(msg)

    @property
    def id(self) -> str:
        """Formulae are identified by their short name."""
        return self.short_name

    @property
    def short_name(self) -> str:
        """Name without any tap prefix."""
        return self.name.rsplit("/", 1)[-1]

    @property
    def effective_tap(self) -> str | None:
        """The explicit tap, or the one implied by a qualified name."""
        if self.tap:
            return self.tap
        parts = self.name.split("/")
        if len(parts) == 3:
            return f"{parts[0]}/{parts[1]}"
        return None

    @property
    def install_name(self) -> str:
        """Name passed to ``brew install``."""
        tap = self.effective_tap
        return f"{tap}/{self.short_name}" if tap else self.name


class BrewFormulaEntry(BaseModel):
    """Object form of a formula entry."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Formula name")]
    tap: Annotated[str | None, Field(description="Tap to install from")] = None


def _entry_to_item(entry: str | BrewFormulaEntry) -> BrewFormula:
    if isinstance(entry, str):
        return BrewFormula(name=entry)
    return BrewFormula(name=entry.name, tap=entry.tap)


def _item_to_entry(formula: BrewFormula) -> str | BrewFormulaEntry:
    """Formulae without an explicit tap are written as plain names."""
    if formula.tap is None:
        return formula.name
    return BrewFormulaEntry(name=formula.name, tap=formula.tap)


class HomebrewManifest(ItemManifest):
    """The homebrew.json manifest."""

    formulae: Annotated[
        list[str | BrewFormulaEntry],
        Field(default_factory=list, description="Formulae to install"),
    ]
    taps: Annotated[
        list[str],
        Field(default_factory=list, description="Taps to add"),
    ]

    def items(self) -> list[BrewFormula]:
        """Return the declared formulae."""
        return [_entry_to_item(entry) for entry in self.formulae]

    def required_taps(self) -> list[str]:
        """Declared taps plus those implied by formulae, sorted."""
        implied = [formula.effective_tap for formula in self.items()]
        return sorted_unique([*self.taps, *(tap for tap in implied if tap)])

    @classmethod
    def merged(cls, system: Self, user: Self) -> Self:
        """Merge formulae by short name with the user winning; union taps."""
        merged = merge_by_identity(system.items(), user.items())
        return cls(
            formulae=[_item_to_entry(formula) for formula in merged],
            taps=sorted_unique([*system.taps, *user.taps]),
        )

    def with_items(self, items: Sequence[BrewFormula]) -> Self:
        """Return a copy with formulae added."""
        known = {formula.id for formula in self.items()}
        added = [_item_to_entry(formula) for formula in items if formula.id not in known]
        return self.model_copy(update={"formulae": [*self.formulae, *added]})

    def normalized(self) -> Self:
        """Sort formulae by short name and taps alphabetically."""
        by_id = {formula.id: formula for formula in self.items()}
        return self.model_copy(
            update={
                "formulae": [_item_to_entry(by_id[key]) for key in sorted(by_id)],
                "taps": sorted_unique(self.taps),
            }
        )
