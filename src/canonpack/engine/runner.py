"""Pack build pipeline runner.

Stages run strictly in order and each hands its output to the next:

    validate: external validator, then dataset load
    payload:  canonical payload assembly
    manifest: manifest over the exact payload bytes
    write:    atomic writes of payload/data.json and manifest.json

A failed stage stops the build; nothing is retried.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from canonpack.audit.helpers import generate_run_id, get_canon_version
from canonpack.audit.logger import AuditLogger
from canonpack.engine.config import BuildConfig, BuildResult
from canonpack.errors import ValidationFailed, exit_code_for_exception
from canonpack.pack.loader import CanonDataset, Validator, accept_all, load_canon
from canonpack.pack.manifest import (
    MANIFEST_PATH,
    PAYLOAD_PATH,
    SIGNATURE_PATH,
    PackManifest,
    build_manifest,
    serialize_manifest,
)
from canonpack.pack.payload import build_canon_payload, hash_payload
from canonpack.utils import write_bytes_atomic

__all__ = ["EVENTS_FILE", "run_build"]

EVENTS_FILE = "events.jsonl"


@contextmanager
def _stage(name: str, logger: AuditLogger | None) -> Iterator[dict[str, int]]:
    start = time.perf_counter()
    counters: dict[str, int] = {}
    if logger:
        logger.stage_started(name)
    try:
        yield counters
    except Exception as e:
        if logger:
            logger.error(type(e).__name__, str(e), stage=name)
        raise
    finally:
        if logger:
            logger.stage_finished(
                name, duration_seconds=time.perf_counter() - start, counters=counters
            )


def _stage_validate(
    config: BuildConfig, validator: Validator, logger: AuditLogger | None
) -> CanonDataset:
    ok, diagnostics = validator(config.canon_path)
    if not ok:
        if logger:
            logger.validation_failed(diagnostics)
        raise ValidationFailed("Canon validation failed", diagnostics)
    return load_canon(config.canon_path)


def _stage_manifest(
    config: BuildConfig, dataset: CanonDataset, payload_bytes: bytes
) -> PackManifest:
    canon_version = config.canon_version or get_canon_version(config.canon_path)
    return build_manifest(
        payload_bytes,
        canon_version=canon_version,
        schema_version=dataset.schema_version,
        identity_version=dataset.identity_version,
        created_at=config.created_at,
    )


def _write_artifact(
    output_dir: Path, relative: str, data: bytes, logger: AuditLogger | None
) -> Path:
    path = output_dir / relative
    write_bytes_atomic(path, data)
    if logger:
        logger.artifact_written(relative, hash_payload(data), len(data))
    return path


def _stage_write(
    config: BuildConfig,
    payload_bytes: bytes,
    manifest_bytes: bytes,
    logger: AuditLogger | None,
) -> dict[str, str]:
    # A signature from an earlier build no longer matches the new manifest
    stale_signature = config.output_dir / SIGNATURE_PATH
    if stale_signature.exists():
        stale_signature.unlink()

    payload_path = _write_artifact(config.output_dir, PAYLOAD_PATH, payload_bytes, logger)
    manifest_path = _write_artifact(config.output_dir, MANIFEST_PATH, manifest_bytes, logger)
    return {"payload": str(payload_path), "manifest": str(manifest_path)}


def _run_stages(
    config: BuildConfig, validator: Validator, logger: AuditLogger | None
) -> BuildResult:
    result = BuildResult(success=False)
    try:
        with _stage("validate", logger) as counters:
            dataset = _stage_validate(config, validator, logger)
            counters["editions"] = len(dataset.editions)
        result.edition_count = len(dataset.editions)

        with _stage("payload", logger) as counters:
            _, payload_bytes = build_canon_payload(dataset)
            counters["payload_bytes"] = len(payload_bytes)
        result.payload_sha256 = hash_payload(payload_bytes)

        with _stage("manifest", logger):
            manifest = _stage_manifest(config, dataset, payload_bytes)
            manifest_bytes = serialize_manifest(manifest)
        result.manifest = manifest

        with _stage("write", logger):
            result.output_files = _stage_write(config, payload_bytes, manifest_bytes, logger)

    except Exception as e:
        result.error_message = f"{type(e).__name__}: {e}"
        result.exit_code = exit_code_for_exception(e)
        if isinstance(e, ValidationFailed):
            result.diagnostics = list(e.diagnostics)
        return result

    result.success = True
    return result


def run_build(
    config: BuildConfig,
    validator: Validator | None = None,
    logger: AuditLogger | None = None,
) -> BuildResult:
    """Build a pack from a canon root.

    Parameters
    ----------
    config : BuildConfig
        Build configuration.
    validator : Validator | None, optional
        Dataset validator taking the canon root. If None, every dataset is
        accepted.
    logger : AuditLogger | None, optional
        Audit logger. If None and ``config.audit_log`` is set, one writing
        to ``<output_dir>/events.jsonl`` is created for this run.

    Returns
    -------
    BuildResult
        Build outcome. Expected failures are reported here, not raised.

    Examples
    --------
    >>> from pathlib import Path
    >>> from canonpack.engine import BuildConfig, run_build
    >>> result = run_build(BuildConfig(canon_path=Path("canon"), output_dir=Path("out")))
    >>> if result.success:
    ...     print(result.payload_sha256)
    """
    if validator is None:
        validator = accept_all

    owns_logger = logger is None and config.audit_log
    if owns_logger:
        logger = AuditLogger(generate_run_id(), config.output_dir / EVENTS_FILE)

    start = time.perf_counter()
    try:
        if logger:
            logger.run_started(config.to_dict())
        result = _run_stages(config, validator, logger)
        if logger:
            logger.run_finished(
                "success" if result.success else "failed",
                duration_seconds=time.perf_counter() - start,
            )
        return result
    finally:
        if owns_logger and logger:
            logger.close()
