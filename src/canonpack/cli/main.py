"""Command-line interface for canonpack.

Provides CLI commands for building, signing and verifying packs and for
working with edition identities and redirects.
"""

import importlib.metadata
import shlex
import sys
from pathlib import Path

import click

from canonpack.errors import (
    AuthenticityError,
    CanonError,
    IntegrityError,
    RedirectError,
    exit_code_for_exception,
)

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("canonpack")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.4.0"  # Fallback for development


def _fail(message: str, errors: list[str] | None = None, exit_code: int = 1) -> None:
    click.secho(f"✗ {message}", fg="red", err=True)
    for error in errors or []:
        click.echo(f"  - {error}", err=True)
    sys.exit(exit_code)


@click.group()
@click.version_option(version=__version__, prog_name="canonpack")
def cli() -> None:
    """Content-addressable identities and signed packs for catalog editions.

    Use 'canonpack COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("canon_path", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    default="out",
    help="Pack output directory (default: out)",
)
@click.option(
    "--canon-version",
    type=str,
    default=None,
    help="Dataset version label (default: <git date>+<sha> of CANON_PATH, else 'local')",
)
@click.option(
    "--validator-cmd",
    type=str,
    default=None,
    help="External validation command run inside CANON_PATH before building",
)
@click.option(
    "--no-audit-log",
    is_flag=True,
    help="Do not write events.jsonl into the output directory",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def build(
    canon_path: str,
    output_dir: str,
    canon_version: str | None,
    validator_cmd: str | None,
    no_audit_log: bool,
    verbose: bool,
) -> None:
    """Build a pack (payload + manifest) from CANON_PATH.

    Examples
    --------
        canonpack build ../canon -o out
        canonpack build ../canon --validator-cmd "pnpm run validate"
    """
    from canonpack.engine import BuildConfig, run_build
    from canonpack.pack import command_validator

    try:
        config = BuildConfig(
            canon_path=Path(canon_path),
            output_dir=Path(output_dir),
            canon_version=canon_version,
            audit_log=not no_audit_log,
        )
    except ValueError as e:
        _fail(f"Invalid configuration: {e}")

    validator = command_validator(shlex.split(validator_cmd)) if validator_cmd else None

    if verbose:
        click.echo(f"Building pack from {canon_path} into {output_dir}", err=True)

    result = run_build(config, validator=validator)

    if not result.success:
        _fail(f"Build failed: {result.error_message}", result.diagnostics, result.exit_code)

    if verbose:
        for name, path in result.output_files.items():
            click.echo(f"  {name}: {path}", err=True)

    click.secho(
        f"✓ Built pack with {result.edition_count} editions "
        f"(payload sha256 {result.payload_sha256})",
        fg="green",
    )


@cli.command()
@click.argument("pack_root", type=click.Path(exists=True, file_okay=False))
@click.argument("key_or_signature", type=click.Path(dir_okay=False), required=False)
@click.option(
    "--attach",
    is_flag=True,
    help="Attach a pre-computed signature (from KEY_OR_SIGNATURE or stdin)",
)
@click.option(
    "--prepare",
    is_flag=True,
    help="Write the exact manifest bytes to stdout for an external signer",
)
def sign(pack_root: str, key_or_signature: str | None, attach: bool, prepare: bool) -> None:
    """Sign PACK_ROOT/manifest.json with Ed25519.

    By default KEY_OR_SIGNATURE is a PEM private key. With --attach it is a
    raw signature file (stdin when omitted).

    Examples
    --------
        canonpack sign out/ keys/signing.pem
        canonpack sign --prepare out/ > manifest.bin
        canonpack sign --attach out/ manifest.sig
    """
    from canonpack.pack import attach_signature, read_manifest_bytes, sign_pack

    if attach and prepare:
        _fail("--attach and --prepare are mutually exclusive")

    root = Path(pack_root)
    try:
        if prepare:
            click.get_binary_stream("stdout").write(read_manifest_bytes(root))
            return

        if attach:
            if key_or_signature:
                signature = Path(key_or_signature).read_bytes()
            else:
                signature = click.get_binary_stream("stdin").read()
            path = attach_signature(root, signature)
            click.secho(f"✓ Attached signature -> {path}", fg="green")
            return

        if not key_or_signature:
            _fail("Private key path is required (or use --attach / --prepare)")
        path = sign_pack(root, Path(key_or_signature).read_bytes())
        click.secho(f"✓ Signed manifest -> {path}", fg="green")
    except (CanonError, OSError) as e:
        _fail(f"Signing failed: {e}", exit_code=exit_code_for_exception(e))


@cli.command()
@click.argument("pack_root", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--public-key",
    "-k",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Ed25519 public key (PEM). Without it only payload hashes are checked",
)
def verify(pack_root: str, public_key: str | None) -> None:
    """Verify payload integrity and, with --public-key, the signature.

    Examples
    --------
        canonpack verify out/
        canonpack verify out/ --public-key keys/signing.pub
    """
    from canonpack.pack import verify_pack

    try:
        key = Path(public_key).read_bytes() if public_key else None
        result = verify_pack(Path(pack_root), key)
    except (CanonError, OSError) as e:
        _fail(f"Verification failed: {e}", exit_code=exit_code_for_exception(e))

    if result.integrity_errors:
        _fail("Integrity check failed:", result.errors, IntegrityError.exit_code)
    if result.authenticity_errors:
        _fail("Signature check failed:", result.authenticity_errors, AuthenticityError.exit_code)

    click.secho(f"✓ Pack verified ({result.mode.value})", fg="green")


@cli.command()
@click.argument("edition_path", type=click.Path(exists=True))
@click.option(
    "--canon",
    "canon_path",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Canon root providing the region mappings",
)
@click.option(
    "--generation",
    "-g",
    type=str,
    default=None,
    help="Hash generation to use, e.g. v3 (default: active generation)",
)
def identity(edition_path: str, canon_path: str | None, generation: str | None) -> None:
    """Print the identity of every edition in EDITION_PATH.

    EDITION_PATH is an edition JSON file (object or list) or a directory.
    """
    from canonpack.api import edition_identities
    from canonpack.identity import ACTIVE_GENERATION, HashGeneration
    from canonpack.pack import load_canon

    try:
        selected = HashGeneration.from_tag(generation) if generation else ACTIVE_GENERATION
        mappings = load_canon(Path(canon_path)).region_mappings if canon_path else None
        identities = edition_identities(
            edition_path, region_mappings=mappings, generation=selected
        )
    except (CanonError, ValueError, OSError) as e:
        _fail(str(e), exit_code=exit_code_for_exception(e))

    for value in identities:
        click.echo(value)


@cli.group()
def redirects() -> None:
    """Validate or regenerate identity_redirects.json."""


@redirects.command("validate")
@click.argument("canon_path", type=click.Path(exists=True, file_okay=False))
def redirects_validate(canon_path: str) -> None:
    """Check CANON_PATH/identity_redirects.json against the editions."""
    from canonpack.api import check_redirects

    try:
        violations = check_redirects(canon_path)
    except (CanonError, OSError) as e:
        _fail(str(e), exit_code=exit_code_for_exception(e))

    if violations:
        _fail(
            f"{len(violations)} redirect violation(s):",
            [v.message for v in violations],
            RedirectError.exit_code,
        )
    click.secho("✓ identity_redirects.json valid", fg="green")


@redirects.command("generate")
@click.argument("canon_path", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--legacy-editions",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory of pre-migration edition files (for v1 redirects)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the map instead of writing identity_redirects.json",
)
def redirects_generate(canon_path: str, legacy_editions: str | None, dry_run: bool) -> None:
    """Regenerate CANON_PATH/identity_redirects.json (merged and flattened)."""
    from canonpack.api import dump_redirect_map, regenerate_redirects

    try:
        redirect_map = regenerate_redirects(
            canon_path, legacy_editions_dir=legacy_editions, write=not dry_run
        )
    except (CanonError, OSError) as e:
        _fail(str(e), exit_code=exit_code_for_exception(e))

    if dry_run:
        click.echo(dump_redirect_map(redirect_map).decode("utf-8"), nl=False)
        return
    click.secho(f"✓ Wrote {len(redirect_map)} redirects", fg="green")


if __name__ == "__main__":
    cli()
