"""
Path helpers — pure functions only.

Canonicalizes raw dependency paths into project-relative identifiers and
answers segment-wise ancestor questions between them.
"""
from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# tmp/chronograph/<cache>/<repo>/<subfolder>/ in its relative, absolute and
# Windows-drive forms.  Checked after separators are normalized.
SYSTEM_PREFIX_PATTERNS = [
    re.compile(r"^tmp/chronograph/[^/]+/[^/]+/[^/]+/"),
    re.compile(r"^/tmp/chronograph/[^/]+/[^/]+/[^/]+/"),
    re.compile(r"^[A-Z]:/tmp/chronograph/[^/]+/[^/]+/[^/]+/"),
]

_DUP_SEP = re.compile(r"/+")


def normalize_path(path: str, extra_patterns=()) -> str:
    """
    Canonicalize a raw path: '/' separators, no duplicates, no leading or
    trailing '/', and the first matching cache prefix stripped.

    Paths in shapes we don't recognize come back separator-cleaned only.
    """
    if not path:
        return ""
    normalized = _DUP_SEP.sub("/", path.replace("\\", "/"))
    if normalized.startswith("/"):
        normalized = normalized[1:]
    if normalized.endswith("/"):
        normalized = normalized[:-1]

    for pattern in (*SYSTEM_PREFIX_PATTERNS, *extra_patterns):
        if pattern.search(normalized):
            stripped = pattern.sub("", normalized, count=1)
            logger.debug("stripped system prefix: %s -> %s", normalized, stripped)
            return stripped
    return normalized


def compile_prefix_patterns(patterns: list[str]) -> list[re.Pattern]:
    """Compile user-configured prefix regexes, skipping ones that don't compile."""
    compiled = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as exc:
            logger.warning("ignoring invalid prefix pattern %r: %s", p, exc)
    return compiled


def path_parts(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def label_of(path: str) -> str:
    parts = path_parts(path)
    return parts[-1] if parts else path


def is_ancestor_or_self(ancestor: str, path: str) -> bool:
    """Segment-wise prefix test: 'lib' contains 'lib/a.dart' but not 'library/a.dart'."""
    anc = path_parts(ancestor)
    parts = path_parts(path)
    return len(anc) <= len(parts) and parts[: len(anc)] == anc


def ancestor_chain(path: str, include_self: bool = True) -> list[str]:
    """All prefixes of `path`, deepest first."""
    parts = path_parts(path)
    start = len(parts) if include_self else len(parts) - 1
    return ["/".join(parts[:i]) for i in range(start, 0, -1)]
