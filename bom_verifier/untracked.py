
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from wcmatch import glob

from .result import ComponentVerificationResult, UntrackedFileResult

logger = logging.getLogger(__name__)

# `*` stays inside one path segment, `**` spans any number of them, dotfiles are not special.
GLOB_FLAGS = glob.GLOBSTAR | glob.DOTGLOB

def _normalize(relpath: str) -> str:
    return relpath.replace("\\", "/")

def collect_verified_paths(results: Iterable[ComponentVerificationResult]) -> Set[str]:
    """Names of every node that was actually hash-checked, whatever the outcome."""
    paths: Set[str] = set()
    stack = list(results)
    while stack:
        r = stack.pop()
        if r.hash_results:
            paths.add(_normalize(r.component_name))
        stack.extend(r.sub_component_results)
    return paths

def _iter_files(root: Path) -> Iterator[str]:
    for p in root.rglob("*"):
        if p.is_file():
            yield p.relative_to(root).as_posix()

def _normalize_pattern(pattern: str) -> str:
    pattern = _normalize(pattern.strip())
    # `dir/` means everything below dir
    if pattern.endswith("/"):
        pattern += "**"
    return pattern

def normalize_ignore_patterns(patterns: Iterable[str]) -> List[str]:
    """Drop blank patterns and expand the `dir/` shorthand."""
    return [_normalize_pattern(p) for p in patterns if p and p.strip()]

def is_ignored(relpath: str, patterns: List[str]) -> bool:
    return bool(patterns) and glob.globmatch(relpath, patterns, flags=GLOB_FLAGS)

def detect_untracked_files(
    base_dir: str,
    verification_results: Iterable[ComponentVerificationResult],
    ignore_patterns: Iterable[str] = (),
) -> UntrackedFileResult:
    """
    Files under base_dir that no result node hash-checked, split into
    ignored (matching an ignore pattern) and untracked. Both lists are
    sorted by code point.
    """
    verified = collect_verified_paths(verification_results)
    patterns = normalize_ignore_patterns(ignore_patterns)
    root = Path(base_dir).resolve()

    untracked: List[str] = []
    ignored: List[str] = []
    for rel in _iter_files(root):
        if rel in verified:
            continue
        if is_ignored(rel, patterns):
            ignored.append(rel)
        else:
            untracked.append(rel)

    logger.info("untracked file detection under %s: %d verified, %d untracked, %d ignored",
                root, len(verified), len(untracked), len(ignored))
    return UntrackedFileResult(tuple(sorted(untracked)), tuple(sorted(ignored)))
