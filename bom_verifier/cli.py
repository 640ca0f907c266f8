
import logging
import os
import sys

import click

from . import report
from .logging_utils import configure_logging
from .manifest import ManifestError, load_manifest, parse_bom
from .paths import PathTraversalError
from .result import VerificationStatus
from .signature import verify_signature
from .untracked import detect_untracked_files
from .verifier import verify_bom

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2

logger = logging.getLogger(__name__)

def _fatal(message: str) -> None:
    report.emit("ERROR", message, err=True)
    sys.exit(EXIT_ERROR)

@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Log engine activity to stderr')
def cli(verbose):
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

@cli.command()
@click.argument('sbom_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--base-dir', type=click.Path(exists=True, file_okay=False),
              help='Base directory for resolving component file paths (default: current directory)')
@click.option('--key-file', type=click.Path(exists=True, dir_okay=False),
              help='JWK public key file for signature verification')
@click.option('--allow-embedded-key', is_flag=True, help='Trust the public key embedded in the JSF signature')
@click.option('--ignore', 'ignore', multiple=True,
              help='Glob pattern (`*`, `**`) excluded from untracked file detection; repeatable')
@click.option('--json', 'as_json', is_flag=True, help='Print a JSON report instead of text')
def verify(sbom_file, base_dir, key_file, allow_embedded_key, ignore, as_json):
    """Verify a CycloneDX SBOM against the files in a directory."""
    base_dir = base_dir or os.getcwd()
    patterns = list(ignore)
    text = not as_json

    try:
        document = load_manifest(sbom_file)
    except OSError as e:
        _fatal(f"Failed to read SBOM file: {e}")
    except ManifestError as e:
        _fatal(str(e))

    passed = True
    sig = verify_signature(document, key_file=key_file, allow_embedded_key=allow_embedded_key)
    if sig.signature_present and not sig.verified:
        passed = False
    if text:
        report.signature_section(sig)
        click.echo()

    try:
        bom = parse_bom(document)
    except ManifestError as e:
        _fatal(f"Failed to parse SBOM: {e}")

    try:
        results = verify_bom(bom, base_dir)
    except PathTraversalError as e:
        logger.warning("aborting: %s", e)
        _fatal(f"Path traversal detected: {e}")

    if any(r.status is not VerificationStatus.PASS for r in results):
        passed = False
    if text:
        report.hash_section(results)
        click.echo()

    untracked = detect_untracked_files(base_dir, results, patterns)
    if untracked.untracked_files:
        passed = False

    if text:
        report.untracked_section(untracked)
        click.echo()
        report.summary(passed)
    else:
        click.echo(report.as_json(sig, results, untracked, passed))

    sys.exit(EXIT_OK if passed else EXIT_FAILED)

def main():
    cli(auto_envvar_prefix='BOM_VERIFIER')

if __name__ == '__main__':
    main()
