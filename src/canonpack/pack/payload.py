"""Canonical payload assembly.

The payload is the whole dataset as one deterministic byte sequence. Every
list is sorted here by content, never by file name or load order, and no
build metadata (time, paths, host) is embedded, so identical logical
content always hashes the same.
"""

from collections.abc import Mapping
from typing import Any

from canonpack.canonical import canonical_bytes, canonical_dumps
from canonpack.pack.loader import CanonDataset
from canonpack.utils import calculate_bytes_sha256

__all__ = ["sort_external_refs", "build_canon_payload", "hash_payload"]


def _ref_key(ref: Any) -> tuple[str, str]:
    if not isinstance(ref, Mapping):
        return ("", "")
    source = ref.get("source")
    ref_id = ref.get("id")
    return ("" if source is None else str(source), "" if ref_id is None else str(ref_id))


def sort_external_refs(edition: Any) -> Any:
    """Return a copy of the edition with ``external_refs`` sorted by (source, id)."""
    if not isinstance(edition, Mapping):
        return edition
    out = dict(edition)
    refs = out.get("external_refs")
    if isinstance(refs, list) and refs:
        out["external_refs"] = sorted(refs, key=_ref_key)
    return out


def _publisher_key(publisher: Any) -> str:
    if isinstance(publisher, Mapping) and publisher.get("publisher_id") is not None:
        return str(publisher["publisher_id"])
    return ""


def build_canon_payload(dataset: CanonDataset) -> tuple[dict[str, Any], bytes]:
    """Assemble the canonical payload for a dataset.

    Parameters
    ----------
    dataset : CanonDataset
        Loaded canon.

    Returns
    -------
    tuple[dict[str, Any], bytes]
        ``(payload, payload_bytes)`` where the bytes are the canonical
        serialization of the payload.
    """
    publishers = sorted(dataset.publishers, key=_publisher_key)
    regions = {
        "canonical": sorted(dataset.region_canonical, key=str),
        "mappings": dict(dataset.region_mappings),
    }

    editions = [sort_external_refs(e) for e in dataset.editions]
    editions.sort(key=canonical_dumps)

    payload = {
        "schema_version": str(dataset.schema_version),
        "identity_version": dataset.identity_version,
        "publishers": publishers,
        "regions": regions,
        "editions": editions,
    }
    return payload, canonical_bytes(payload)


def hash_payload(payload_bytes: bytes) -> str:
    """Return the sha256 hex digest of serialized payload bytes."""
    return calculate_bytes_sha256(payload_bytes)
