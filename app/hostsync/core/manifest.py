"""Manifest file I/O operations.

Manifests are JSON documents, one per subsystem, stored as two layers:
a read-only system layer shipped with the host image and a user layer
under the config directory. This module loads and validates layers with
Pydantic models and writes the user layer back atomically.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class ManifestError(Exception):
    """Base exception for manifest-related errors."""


class ManifestNotFoundError(ManifestError):
    """Raised when a manifest file is not found."""


class ManifestParseError(ManifestError):
    """Raised when a manifest file is not valid JSON."""


class ManifestValidationError(ManifestError):
    """Raised when manifest content does not match its schema."""


class ManifestWriteError(ManifestError):
    """Raised when a manifest file cannot be written."""


class ManifestDocument(BaseModel):
    """Base model for a subsystem manifest document.

    The optional ``$schema`` key used by editors is accepted and written
    back unchanged.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_url: Annotated[
        str | None,
        Field(alias="$schema", description="JSON schema reference for editors"),
    ] = None

    def normalized(self) -> Self:
        """Return a copy suitable for writing (sorted, deduplicated lists).

        Subclasses with list sections override this.
        """
        return self

    def to_json(self) -> str:
        """Serialize the document as pretty-printed JSON."""
        data = self.normalized().model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(data, indent=2) + "\n"


class ItemManifest(ManifestDocument, ABC):
    """A manifest document that declares a collection of resources."""

    @abstractmethod
    def items(self) -> list[Any]:
        """Return the declared resources in document order."""

    @classmethod
    @abstractmethod
    def merged(cls, system: Self, user: Self) -> Self:
        """Merge a system layer with a user layer.

        Args:
            system: Read-only baseline layer.
            user: User layer, which wins on conflicts.

        Returns:
            The merged view, holding at most one resource per identity.
        """

    @abstractmethod
    def with_items(self, items: Sequence[Any]) -> Self:
        """Return a copy with the given resources added.

        Resources whose identity is already declared are left untouched.
        """

    @classmethod
    def from_items(cls, items: Sequence[Any]) -> Self:
        """Build a document declaring exactly the given resources."""
        return cls().with_items(items)


M = TypeVar("M", bound=ManifestDocument)


@dataclass(frozen=True, slots=True)
class ManifestLayers(Generic[M]):
    """The system and user layers of one subsystem manifest.

    Attributes:
        system: Read-only baseline layer.
        user: User layer, the only one ever written back.
        user_path: Where the user layer lives on disk.
    """

    system: M
    user: M
    user_path: Path


def load_document(path: Path, model: type[M]) -> M:
    """Load and validate a manifest document from a JSON file.

    Args:
        path: Path to the manifest file.
        model: Document model to validate against.

    Returns:
        Validated document.

    Raises:
        ManifestNotFoundError: If the file doesn't exist.
        ManifestParseError: If the JSON syntax is invalid.
        ManifestValidationError: If the content doesn't match the schema.
        ManifestError: If the file cannot be read.
    """
    if not path.exists():
        raise ManifestNotFoundError(f"Manifest not found: {path}")

    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestParseError(f"{path}: invalid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"{path}: failed to read manifest: {e}") from e

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ManifestValidationError(f"{path}: invalid manifest content: {e}") from e


def load_layer(path: Path, model: type[M]) -> M:
    """Load one manifest layer, treating a missing file as an empty layer.

    Args:
        path: Path to the layer file.
        model: Document model to validate against.

    Returns:
        Validated document, or an empty document if the file is absent.

    Raises:
        ManifestError: If the file exists but cannot be read or validated.
    """
    try:
        return load_document(path, model)
    except ManifestNotFoundError:
        logger.debug("No manifest at %s, using empty layer", path)
        return model()


def load_layers(system_path: Path, user_path: Path, model: type[M]) -> ManifestLayers[M]:
    """Load the system and user layers of a manifest.

    Args:
        system_path: Path to the system layer.
        user_path: Path to the user layer.
        model: Document model for both layers.

    Returns:
        ManifestLayers holding both validated documents.

    Raises:
        ManifestError: If either layer exists but is invalid.
    """
    return ManifestLayers(
        system=load_layer(system_path, model),
        user=load_layer(user_path, model),
        user_path=user_path,
    )


def save_document(document: ManifestDocument, path: Path) -> Path:
    """Save a manifest document to a JSON file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.
    The temporary file is cleaned up on failure.

    Args:
        document: The document to save.
        path: Destination path.

    Returns:
        Path where the document was saved.

    Raises:
        ManifestWriteError: If the file cannot be written.
    """
    content = document.to_json()

    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestWriteError(f"{path}: failed to write manifest: {e}") from e

    logger.info("Wrote manifest %s", path)
    return path


def sorted_unique(values: list[str]) -> list[str]:
    """Sort string values and drop duplicates."""
    return sorted(set(values))
