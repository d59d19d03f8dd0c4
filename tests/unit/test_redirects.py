"""Tests for identity redirect resolution, validation and generation."""

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from canonpack.errors import (
    CanonLoadError,
    InvalidIdentityError,
    RedirectChainError,
    RedirectError,
    RedirectLoopError,
    RedirectMapError,
)
from canonpack.identity import (
    HashGeneration,
    RedirectViolation,
    ViolationKind,
    compute_identity,
    compute_identity_for_generation,
    flatten_redirects,
    generate_redirects,
    load_redirect_map,
    resolve_identity,
    validate_redirect_map,
)

V1_SNAPSHOT = "edition:v1:f7382564745dc1cee40138cedd935c030150fd6d86258e5feafe8f4856888f43"
V2_SNAPSHOT = "edition:v2:ffa2951e8174a4f111635f5c03c6b47d69b2f87462251d7dbb8136b1d4703c6b"
V3_SNAPSHOT = "edition:v3:dcda8475935cc1a53749a3d181e5135b2f4f52622f294ce9a89f304258be35a8"
V4_SNAPSHOT = "edition:v4:f3f65dece0655379a2e757b8603d89cfdd065bda3ef68c5b75f36aed4fdeb725"
UNKNOWN_V4 = "edition:v4:" + "0" * 64


def _kinds(violations: list[RedirectViolation]) -> set[ViolationKind]:
    return {v.kind for v in violations}


# ---------------------------------------------------------------------------
# resolve_identity
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_resolve_follows_single_hop() -> None:
    """Test a legacy identity resolves to its target."""
    assert resolve_identity("old", {"old": "new"}) == "new"


@pytest.mark.unit
def test_resolve_unknown_returns_trimmed_input() -> None:
    """Test identities without a redirect come back unchanged."""
    assert resolve_identity("  current  ", {"old": "new"}) == "current"


@pytest.mark.unit
def test_resolve_trims_before_lookup() -> None:
    """Test surrounding whitespace is ignored when looking up."""
    assert resolve_identity(" old\n", {"old": "new"}) == "new"


@pytest.mark.unit
def test_resolve_rejects_chain() -> None:
    """Test a target that is itself a key is refused."""
    with pytest.raises(RedirectChainError, match="must be flattened"):
        resolve_identity("a", {"a": "b", "b": "c"})


@pytest.mark.unit
def test_resolve_rejects_self_loop() -> None:
    """Test an identity mapped to itself is refused as a loop."""
    with pytest.raises(RedirectLoopError):
        resolve_identity("a", {"a": "a"})


@pytest.mark.unit
def test_resolve_errors_share_exit_code() -> None:
    """Test both structural failures are redirect errors."""
    assert issubclass(RedirectChainError, RedirectError)
    assert issubclass(RedirectLoopError, RedirectError)
    assert RedirectError.exit_code == 4


@pytest.mark.unit
@pytest.mark.parametrize("identity", ["", "   ", None, 42])
def test_resolve_rejects_blank_or_non_string(identity: object) -> None:
    """Test invalid input raises."""
    with pytest.raises(InvalidIdentityError):
        resolve_identity(identity, {})


# ---------------------------------------------------------------------------
# load_redirect_map
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_load_redirect_map(tmp_path: Path) -> None:
    """Test a valid map loads without duplicates."""
    path = tmp_path / "identity_redirects.json"
    path.write_text(json.dumps({V2_SNAPSHOT: V4_SNAPSHOT}))

    redirects, duplicates = load_redirect_map(path)

    assert redirects == {V2_SNAPSHOT: V4_SNAPSHOT}
    assert duplicates == []


@pytest.mark.unit
def test_load_redirect_map_reports_duplicate_keys(tmp_path: Path) -> None:
    """Test repeated keys are reported and the last value kept."""
    path = tmp_path / "identity_redirects.json"
    path.write_text(
        "{\n"
        f'  "{V2_SNAPSHOT}": "{UNKNOWN_V4}",\n'
        f'  "{V3_SNAPSHOT}": "{V4_SNAPSHOT}",\n'
        f'  "{V2_SNAPSHOT}": "{V4_SNAPSHOT}"\n'
        "}\n"
    )

    redirects, duplicates = load_redirect_map(path)

    assert duplicates == [V2_SNAPSHOT]
    assert redirects[V2_SNAPSHOT] == V4_SNAPSHOT


@pytest.mark.unit
@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '["edition:v1:abc"]',
        '{"legacy": "edition:v4:' + "0" * 64 + '"}',
        '{"edition:v2:' + "0" * 64 + '": 4}',
    ],
)
def test_load_redirect_map_rejects_malformed(tmp_path: Path, content: str) -> None:
    """Test invalid JSON and wrongly shaped maps raise."""
    path = tmp_path / "identity_redirects.json"
    path.write_text(content)

    with pytest.raises(RedirectMapError):
        load_redirect_map(path)


@pytest.mark.unit
def test_load_redirect_map_missing_file(tmp_path: Path) -> None:
    """Test a missing file is a load error."""
    with pytest.raises(CanonLoadError):
        load_redirect_map(tmp_path / "missing.json")


# ---------------------------------------------------------------------------
# flatten_redirects
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_flatten_collapses_chains() -> None:
    """Test multi-hop histories point straight at the final target."""
    assert flatten_redirects({"a": "b", "b": "c", "x": "c"}) == {"a": "c", "b": "c", "x": "c"}


@pytest.mark.unit
def test_flatten_rejects_cycles() -> None:
    """Test cycles raise instead of looping forever."""
    with pytest.raises(RedirectMapError, match="cycle"):
        flatten_redirects({"a": "b", "b": "a"})


@pytest.mark.unit
def test_flattened_map_resolves() -> None:
    """Test every key of a flattened map resolves in one hop."""
    flat = flatten_redirects({"a": "b", "b": "c", "c": "d"})

    assert {resolve_identity(key, flat) for key in flat} == {"d"}


# ---------------------------------------------------------------------------
# validate_redirect_map
# ---------------------------------------------------------------------------


@pytest.fixture
def valid_map() -> dict[str, str]:
    """Complete redirect map for the sample edition."""
    return {V2_SNAPSHOT: V4_SNAPSHOT, V3_SNAPSHOT: V4_SNAPSHOT}


@pytest.mark.unit
def test_validate_accepts_complete_map(
    snapshot_edition: dict[str, Any],
    region_mappings: dict[str, str],
    valid_map: dict[str, str],
) -> None:
    """Test a flattened, complete map has no violations."""
    assert validate_redirect_map(valid_map, [snapshot_edition], region_mappings) == []


@pytest.mark.unit
def test_validate_reports_missing_redirect(
    snapshot_edition: dict[str, Any], region_mappings: dict[str, str]
) -> None:
    """Test legacy identities without a redirect are reported."""
    violations = validate_redirect_map(
        {V3_SNAPSHOT: V4_SNAPSHOT}, [snapshot_edition], region_mappings
    )

    assert len(violations) == 1
    assert violations[0].kind is ViolationKind.MISSING_REDIRECT
    assert violations[0].identity == V2_SNAPSHOT


@pytest.mark.unit
def test_validate_reports_dangling_target(
    snapshot_edition: dict[str, Any],
    region_mappings: dict[str, str],
    valid_map: dict[str, str],
) -> None:
    """Test targets that match no current edition are reported."""
    valid_map[V1_SNAPSHOT] = UNKNOWN_V4

    violations = validate_redirect_map(valid_map, [snapshot_edition], region_mappings)

    assert [(v.kind, v.identity) for v in violations] == [
        (ViolationKind.DANGLING_TARGET, V1_SNAPSHOT)
    ]


@pytest.mark.unit
def test_validate_reports_stale_target_and_chain(
    snapshot_edition: dict[str, Any], region_mappings: dict[str, str]
) -> None:
    """Test a redirect into a legacy identity is stale, chained and dangling."""
    redirects = {V2_SNAPSHOT: V3_SNAPSHOT, V3_SNAPSHOT: V4_SNAPSHOT}

    violations = validate_redirect_map(redirects, [snapshot_edition], region_mappings)

    assert _kinds(violations) == {
        ViolationKind.CHAIN,
        ViolationKind.STALE_TARGET,
        ViolationKind.DANGLING_TARGET,
    }
    assert {v.identity for v in violations} == {V2_SNAPSHOT}


@pytest.mark.unit
def test_validate_reports_self_loop(
    snapshot_edition: dict[str, Any],
    region_mappings: dict[str, str],
    valid_map: dict[str, str],
) -> None:
    """Test a self-loop is reported and turns entries targeting it into chains."""
    valid_map[V4_SNAPSHOT] = V4_SNAPSHOT

    violations = validate_redirect_map(valid_map, [snapshot_edition], region_mappings)

    assert _kinds(violations) == {ViolationKind.SELF_LOOP, ViolationKind.CHAIN}
    assert {v.identity for v in violations if v.kind is ViolationKind.SELF_LOOP} == {
        V4_SNAPSHOT
    }
    assert {v.identity for v in violations if v.kind is ViolationKind.CHAIN} == {
        V2_SNAPSHOT,
        V3_SNAPSHOT,
    }


@pytest.mark.unit
def test_validate_reports_duplicate_keys(
    snapshot_edition: dict[str, Any],
    region_mappings: dict[str, str],
    valid_map: dict[str, str],
) -> None:
    """Test duplicate keys seen while parsing are reported once each."""
    violations = validate_redirect_map(
        valid_map,
        [snapshot_edition],
        region_mappings,
        duplicate_keys=[V2_SNAPSHOT, V2_SNAPSHOT],
    )

    assert [(v.kind, v.identity) for v in violations] == [
        (ViolationKind.DUPLICATE_KEY, V2_SNAPSHOT)
    ]


@pytest.mark.unit
def test_validate_reports_invalid_edition(
    snapshot_edition: dict[str, Any],
    region_mappings: dict[str, str],
    valid_map: dict[str, str],
) -> None:
    """Test unhashable editions are reported instead of raised."""
    violations = validate_redirect_map(
        valid_map, [snapshot_edition, {"discs": "BLURAY"}], region_mappings
    )

    assert [(v.kind, v.identity) for v in violations] == [(ViolationKind.INVALID_EDITION, "#1")]


@pytest.mark.unit
def test_validate_collects_every_violation(region_mappings: dict[str, str]) -> None:
    """Test several defects are all reported in one pass."""
    edition = {"movies": [{"tmdb_movie_id": 1}], "publisher": "p"}
    current = compute_identity(edition, region_mappings)
    redirects = {current: current, V2_SNAPSHOT: UNKNOWN_V4}

    violations = validate_redirect_map(redirects, [edition], region_mappings)

    assert _kinds(violations) == {
        ViolationKind.SELF_LOOP,
        ViolationKind.DANGLING_TARGET,
        ViolationKind.MISSING_REDIRECT,
    }


@pytest.mark.unit
def test_violation_to_dict() -> None:
    """Test violations serialize with a plain kind string."""
    violation = RedirectViolation(ViolationKind.CHAIN, "a", "msg")

    assert violation.to_dict() == {"kind": "chain", "identity": "a", "message": "msg"}


# ---------------------------------------------------------------------------
# generate_redirects
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_generate_redirects_for_current_editions(
    snapshot_edition: dict[str, Any], region_mappings: dict[str, str]
) -> None:
    """Test legacy V2/V3 identities redirect to the current identity."""
    redirects = generate_redirects([snapshot_edition], region_mappings)

    assert redirects == {V2_SNAPSHOT: V4_SNAPSHOT, V3_SNAPSHOT: V4_SNAPSHOT}
    assert list(redirects) == sorted(redirects)


@pytest.mark.unit
def test_generate_redirects_from_legacy_records(
    snapshot_edition: dict[str, Any], region_mappings: dict[str, str]
) -> None:
    """Test pre-migration records contribute their V1 identity."""
    legacy = copy.deepcopy(snapshot_edition)
    legacy["region"] = legacy["discs"][0].pop("region")

    redirects = generate_redirects(
        [snapshot_edition], region_mappings, legacy_editions=[legacy]
    )

    assert redirects[V1_SNAPSHOT] == V4_SNAPSHOT


@pytest.mark.unit
def test_generate_redirects_skips_unmigrated_legacy_records(
    snapshot_edition: dict[str, Any], region_mappings: dict[str, str]
) -> None:
    """Test legacy records without an edition region add nothing."""
    redirects = generate_redirects(
        [snapshot_edition], region_mappings, legacy_editions=[copy.deepcopy(snapshot_edition)]
    )

    assert set(redirects) == {V2_SNAPSHOT, V3_SNAPSHOT}


@pytest.mark.unit
def test_generate_redirects_flattens_existing(
    snapshot_edition: dict[str, Any], region_mappings: dict[str, str]
) -> None:
    """Test existing entries pointing at legacy identities are flattened."""
    older = "edition:v1:" + "1" * 64

    redirects = generate_redirects(
        [snapshot_edition], region_mappings, existing={older: V2_SNAPSHOT}
    )

    assert redirects[older] == V4_SNAPSHOT
    assert validate_redirect_map(redirects, [snapshot_edition], region_mappings) == []


@pytest.mark.unit
def test_generate_redirects_skips_unchanged_identities(region_mappings: dict[str, str]) -> None:
    """Test no self-redirect is produced for any generation."""
    edition = {"publisher": "p"}
    current = compute_identity(edition, region_mappings)
    v2 = compute_identity_for_generation(edition, HashGeneration.V2, region_mappings)

    redirects = generate_redirects([edition], region_mappings)

    assert current not in redirects
    assert redirects[v2] == current
