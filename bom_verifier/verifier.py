
import logging
import os
from typing import Iterable, List, Optional

from .hashing import hash_file, is_supported
from .manifest import Bom, Component
from .paths import resolve_component_path
from .result import ComponentVerificationResult, HashResult, VerificationStatus

logger = logging.getLogger(__name__)

PASS = VerificationStatus.PASS
FAIL = VerificationStatus.FAIL
SKIPPED = VerificationStatus.SKIPPED
FILE_NOT_FOUND = VerificationStatus.FILE_NOT_FOUND

def _failed_names(results: Iterable[ComponentVerificationResult]) -> str:
    return ", ".join(r.component_name for r in results if r.status is not PASS)

def _verify_hashes(component: Component, base_dir: str) -> List[HashResult]:
    # PathTraversalError propagates: one bad name invalidates the whole manifest.
    path = resolve_component_path(base_dir, component.name)
    if not os.path.isfile(path):
        return [HashResult(h.algorithm, FILE_NOT_FOUND, f"File not found: {path}")
                for h in component.hashes]

    out: List[HashResult] = []
    for h in component.hashes:
        if not is_supported(h.algorithm):
            logger.warning("%s: unsupported hash algorithm %s", component.name, h.algorithm)
            out.append(HashResult(h.algorithm, SKIPPED, f"Unsupported algorithm: {h.algorithm}"))
            continue
        got = hash_file(path, h.algorithm)
        if got.lower() == h.content.lower():
            out.append(HashResult(h.algorithm, PASS))
        else:
            out.append(HashResult(h.algorithm, FAIL, f"Expected {h.content}, got {got}"))
    return out

def verify_component(component: Component, base_dir: str) -> Optional[ComponentVerificationResult]:
    """
    Depth-first verification of one component subtree.
    Returns None when nothing in the subtree carries a verifiable hash.
    """
    sub_results = []
    for child in component.components:
        r = verify_component(child, base_dir)
        if r is not None:
            sub_results.append(r)
    subs = tuple(sub_results)
    any_sub_failed = any(r.status is not PASS for r in subs)

    if not component.is_file:
        if not subs:
            logger.debug("pruned %s (%s): nothing to verify", component.name, component.type.value)
            return None
        return ComponentVerificationResult(
            component.name,
            FAIL if any_sub_failed else PASS,
            (),
            subs,
            f"Sub-component(s) failed: {_failed_names(subs)}" if any_sub_failed else None,
        )

    hash_results = tuple(_verify_hashes(component, base_dir)) if component.hashes else ()
    own_failed = any(h.status in (FAIL, FILE_NOT_FOUND) for h in hash_results)

    detail = None
    if own_failed and any_sub_failed:
        status = FAIL
        detail = f"Hash verification failed; sub-component(s) also failed: {_failed_names(subs)}"
    elif own_failed:
        only_missing = all(h.status in (FILE_NOT_FOUND, SKIPPED) for h in hash_results)
        status = FILE_NOT_FOUND if only_missing else FAIL
    elif any_sub_failed:
        status = FAIL
        detail = f"Sub-component(s) failed: {_failed_names(subs)}"
    elif not hash_results and not subs:
        return None
    else:
        status = PASS

    return ComponentVerificationResult(component.name, status, hash_results, subs, detail)

def verify_components(roots: Iterable[Component], base_dir: str) -> List[ComponentVerificationResult]:
    results = []
    for component in roots:
        r = verify_component(component, base_dir)
        if r is not None:
            results.append(r)
    return results

def verify_bom(bom: Bom, base_dir: str) -> List[ComponentVerificationResult]:
    """Verify the metadata component and every top-level component against base_dir."""
    results = verify_components(bom.roots(), base_dir)
    failed = sum(1 for r in results if r.status is not PASS)
    logger.info("hash verification: %d root result(s), %d not passing", len(results), failed)
    return results
