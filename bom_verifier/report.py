
import json
from typing import Any, Dict, List

import click

from .result import ComponentVerificationResult, SignatureResult, UntrackedFileResult, VerificationStatus

_TAGS = {
    "PASS": ("[PASS] ", "green"),
    "FAIL": ("[FAIL] ", "red"),
    "SKIP": ("[SKIP] ", "yellow"),
    "IGNORED": ("[IGNORED] ", "bright_black"),
    "ERROR": ("[ERROR] ", "red"),
}

def emit(tag: str, message: str, err: bool = False) -> None:
    prefix, color = _TAGS[tag]
    click.secho(prefix, fg=color, nl=False, err=err)
    click.echo(message, err=err)

def heading(title: str) -> None:
    click.echo(f"=== {title} ===")

def signature_section(sig: SignatureResult) -> None:
    heading("Signature Verification")
    if not sig.signature_present:
        emit("SKIP", sig.message)
    elif sig.verified:
        emit("PASS", sig.message)
    else:
        emit("FAIL", sig.message)

def component_lines(result: ComponentVerificationResult, indent: int = 1) -> None:
    prefix = "  " * indent
    for h in result.hash_results:
        label = f"{prefix}{result.component_name} [{h.algorithm}]"
        if h.status is VerificationStatus.PASS:
            emit("PASS", label)
        elif h.status is VerificationStatus.SKIPPED:
            emit("SKIP", f"{label}: {h.detail}")
        else:
            emit("FAIL", f"{label}: {h.detail}")

    for sub in result.sub_component_results:
        component_lines(sub, indent + 1)

    if result.detail is not None and result.sub_component_results:
        emit("FAIL" if result.status is VerificationStatus.FAIL else "PASS", f"{prefix}{result.detail}")

def hash_section(results: List[ComponentVerificationResult]) -> None:
    heading("Hash Verification")
    if not results:
        emit("SKIP", "No components with hashes found.")
    for r in results:
        component_lines(r)

def untracked_section(untracked: UntrackedFileResult) -> None:
    heading("Untracked File Detection")
    for f in untracked.ignored_files:
        emit("IGNORED", f"  {f}")
    if not untracked.untracked_files:
        emit("PASS", "No untracked files found.")
        return
    for f in untracked.untracked_files:
        emit("FAIL", f"  {f}")
    emit("FAIL", f"{len(untracked.untracked_files)} untracked file(s) found in base directory.")

def summary(passed: bool) -> None:
    if passed:
        emit("PASS", "All verifications passed.")
    else:
        emit("FAIL", "One or more verifications failed.")

def as_json(sig: SignatureResult, results: List[ComponentVerificationResult],
            untracked: UntrackedFileResult, passed: bool) -> str:
    doc: Dict[str, Any] = {
        "signature": {
            "verified": sig.verified,
            "signature_present": sig.signature_present,
            "message": sig.message,
            **sig.details,
        },
        "components": [r.to_dict() for r in results],
        "untracked": {
            "untracked_files": list(untracked.untracked_files),
            "ignored_files": list(untracked.ignored_files),
        },
        "passed": passed,
    }
    return json.dumps(doc, indent=2, ensure_ascii=False)
