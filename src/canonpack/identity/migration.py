"""Move the legacy edition-level region onto discs."""

from collections.abc import Mapping
from typing import Any

from canonpack.errors import InvalidEditionError

__all__ = ["migrate_edition_region"]


def _has_value(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def migrate_edition_region(edition: Mapping[str, Any]) -> tuple[bool, dict[str, Any]]:
    """Move edition-level ``region`` onto every disc lacking one.

    Discs that already record a region keep it, and the edition-level key is
    removed. Editions without a usable edition-level region are returned
    unchanged, so applying the migration to its own output is a no-op.

    Parameters
    ----------
    edition : Mapping[str, Any]
        Raw edition document. Not modified.

    Returns
    -------
    tuple[bool, dict[str, Any]]
        ``(changed, migrated_edition)``.
    """
    if not isinstance(edition, Mapping):
        raise InvalidEditionError("Edition must be a non-null object")

    out = dict(edition)
    region = out.get("region")
    if not _has_value(region):
        return False, out

    del out["region"]
    region_text = str(region).strip()
    discs = out.get("discs")
    if isinstance(discs, list):
        out["discs"] = [
            {**disc, "region": region_text}
            if isinstance(disc, Mapping) and not _has_value(disc.get("region"))
            else disc
            for disc in discs
        ]
    return True, out
