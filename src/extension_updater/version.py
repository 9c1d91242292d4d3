"""Semantic version ordering.

The single gate for "a new version is available". Versions are
``major.minor.patch`` with an optional leading ``v``, optional pre-release
(``-beta.2``) and optional build metadata (``+20240101``). Missing minor or
patch parts count as zero.

Precedence follows semver: numeric core first, then a pre-release sorts
before its release, and pre-release identifiers compare one by one (numeric
ones numerically and below alphanumeric ones). Build metadata only breaks
ties lexically so the order stays total. Identifiers are non-empty and
numeric ones carry no leading zeros, so distinct canonical strings never tie.
"""

from __future__ import annotations

import enum
import re
from itertools import zip_longest
from typing import List, NamedTuple, Tuple, Union

# Numeric identifiers carry no leading zeros; every dot-separated identifier
# is non-empty.
_NUM = r"(?:0|[1-9]\d*)"
_PRE_ID = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_ID = r"[0-9A-Za-z-]+"
_SEMVER_RE = re.compile(
    rf"^[vV]?(?P<major>{_NUM})(?:\.(?P<minor>{_NUM}))?(?:\.(?P<patch>{_NUM}))?"
    rf"(?:-(?P<pre>{_PRE_ID}(?:\.{_PRE_ID})*))?"
    rf"(?:\+(?P<build>{_BUILD_ID}(?:\.{_BUILD_ID})*))?$"
)


class Comparison(enum.IntEnum):
    LESSER = -1
    EQUAL = 0
    GREATER = 1


class _Parsed(NamedTuple):
    core: Tuple[int, int, int]
    pre: List[Union[int, str]]
    build: str


def compare_versions(a: str, b: str) -> int:
    """Return ``1`` if ``a`` is newer than ``b``, ``-1`` if older, else ``0``.

    Raises ``ValueError`` when either input is not a semantic version.
    """

    left = _parse(a)
    right = _parse(b)
    if left.core != right.core:
        return 1 if left.core > right.core else -1
    # A pre-release sorts before the release it leads up to
    if left.pre and not right.pre:
        return -1
    if right.pre and not left.pre:
        return 1
    result = _compare_parts(left.pre, right.pre)
    if result:
        return result
    if left.build != right.build:
        return 1 if left.build > right.build else -1
    return 0


def compare(a: str, b: str) -> Comparison:
    return Comparison(compare_versions(a, b))


def is_version_newer(current: str, candidate: str) -> bool:
    """Return True if ``candidate`` is newer than ``current``.

    Unparsable candidates are never newer; an unparsable current version is
    always superseded by a valid candidate.
    """

    try:
        _parse(candidate)
    except ValueError:
        return False
    try:
        return compare_versions(candidate, current) > 0
    except ValueError:
        return True


def is_valid_version(version: str) -> bool:
    return bool(_SEMVER_RE.match((version or "").strip()))


def _parse(version: str) -> _Parsed:
    m = _SEMVER_RE.match((version or "").strip())
    if not m:
        raise ValueError(f"not a semantic version: {version!r}")
    core = (
        int(m.group("major")),
        int(m.group("minor") or 0),
        int(m.group("patch") or 0),
    )
    return _Parsed(core, _version_parts(m.group("pre") or ""), m.group("build") or "")


def _version_parts(pre: str) -> List[Union[int, str]]:
    parts: List[Union[int, str]] = []
    for chunk in pre.split(".") if pre else []:
        parts.append(int(chunk) if chunk.isdigit() else chunk)
    return parts


def _compare_parts(
    left: List[Union[int, str]], right: List[Union[int, str]]
) -> int:
    for cur, cand in zip_longest(left, right):
        if cur == cand:
            continue
        # A shorter identifier list sorts first when it is a prefix
        if cur is None:
            return -1
        if cand is None:
            return 1
        if isinstance(cur, int) and isinstance(cand, int):
            return 1 if cur > cand else -1
        if isinstance(cur, int):
            return -1
        if isinstance(cand, int):
            return 1
        return 1 if cur > cand else -1
    return 0


__all__ = [
    "Comparison",
    "compare",
    "compare_versions",
    "is_version_newer",
    "is_valid_version",
]
