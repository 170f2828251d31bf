from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from pydantic import ValidationError

from brewcalc.schemas.recipe import Recipe, RecipeVersion

logger = logging.getLogger("brewcalc.versions")


class VersionConflictError(ValueError):
    """Raised when a version would overwrite or misfile an existing history entry."""


class VersionNotFoundError(LookupError):
    """Raised when restoring a version number that was never saved."""


def versions_for_recipe(history: Sequence[RecipeVersion], recipe_id: str) -> list[RecipeVersion]:
    return sorted(
        (version for version in history if version.recipe_id == recipe_id),
        key=lambda version: version.version_number,
    )


def latest_version_number(history: Sequence[RecipeVersion], recipe_id: str) -> int:
    return max((version.version_number for version in history if version.recipe_id == recipe_id), default=0)


def find_version(history: Sequence[RecipeVersion], recipe_id: str, version_number: int) -> RecipeVersion | None:
    return next(
        (
            version
            for version in history
            if version.recipe_id == recipe_id and version.version_number == version_number
        ),
        None,
    )


def snapshot_recipe(
    recipe: Recipe,
    history: Sequence[RecipeVersion],
    *,
    change_notes: str | None = None,
) -> RecipeVersion:
    """Freeze a deep copy of ``recipe`` as its next version."""
    return RecipeVersion(
        recipe_id=recipe.id,
        version_number=latest_version_number(history, recipe.id) + 1,
        change_notes=change_notes,
        recipe_snapshot=recipe.model_copy(deep=True),
    )


def append_version(history: Sequence[RecipeVersion], version: RecipeVersion) -> list[RecipeVersion]:
    if version.recipe_snapshot.id != version.recipe_id:
        raise VersionConflictError(
            f"Snapshot of recipe {version.recipe_snapshot.id} cannot be filed under recipe {version.recipe_id}"
        )
    if find_version(history, version.recipe_id, version.version_number) is not None:
        raise VersionConflictError(
            f"Version {version.version_number} of recipe {version.recipe_id} already exists"
        )
    return [*history, version]


def save_version(
    recipe: Recipe,
    history: Sequence[RecipeVersion],
    *,
    change_notes: str | None = None,
) -> tuple[Recipe, list[RecipeVersion]]:
    """Snapshot the recipe and return it renumbered alongside the extended history."""
    version = snapshot_recipe(recipe, history, change_notes=change_notes)
    updated_history = append_version(history, version)
    saved = recipe.model_copy(
        update={"current_version": version.version_number, "updated_at": datetime.now(timezone.utc)},
        deep=True,
    )
    logger.info(
        json.dumps(
            {
                "event": "recipe_version_saved",
                "recipe_id": recipe.id,
                "version_number": version.version_number,
            }
        )
    )
    return saved, updated_history


def restore_version(
    recipe: Recipe,
    history: Sequence[RecipeVersion],
    version_number: int,
) -> tuple[Recipe, list[RecipeVersion]]:
    """Bring back an earlier version.

    The recipe being replaced is snapshotted first so the restore can itself
    be undone. The restored recipe keeps its id and points back at the
    version it came from.
    """
    target = find_version(history, recipe.id, version_number)
    if target is None:
        raise VersionNotFoundError(f"Version {version_number} of recipe {recipe.id} does not exist")

    auto_snapshot = snapshot_recipe(
        recipe,
        history,
        change_notes=f"Auto-saved before restoring version {version_number}",
    )
    updated_history = append_version(history, auto_snapshot)

    restored = target.recipe_snapshot.model_copy(
        update={
            "id": recipe.id,
            "current_version": auto_snapshot.version_number,
            "parent_version_number": version_number,
            "created_at": recipe.created_at,
            "updated_at": datetime.now(timezone.utc),
        },
        deep=True,
    )
    logger.info(
        json.dumps(
            {
                "event": "recipe_version_restored",
                "recipe_id": recipe.id,
                "restored_version": version_number,
                "auto_snapshot_version": auto_snapshot.version_number,
            }
        )
    )
    return restored, updated_history


def dump_version_history(history: Sequence[RecipeVersion]) -> str:
    return json.dumps([version.model_dump(mode="json") for version in history])


def parse_version_history(raw_payload: str | None) -> list[RecipeVersion]:
    if not raw_payload:
        return []

    try:
        payload = json.loads(raw_payload)
    except json.JSONDecodeError:
        logger.warning(json.dumps({"event": "version_history_unreadable"}))
        return []

    if not isinstance(payload, list):
        logger.warning(json.dumps({"event": "version_history_unreadable", "payload_type": type(payload).__name__}))
        return []

    versions: list[RecipeVersion] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            logger.warning(
                json.dumps({"event": "version_history_item_skipped", "index": index, "item_type": type(item).__name__})
            )
            continue
        try:
            versions.append(RecipeVersion.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                json.dumps({"event": "version_history_item_skipped", "index": index, "errors": exc.error_count()})
            )
    return versions
