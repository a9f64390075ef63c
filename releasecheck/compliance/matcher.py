"""Semantic-version constraint matching.

Constraints follow the semver range grammar used by release tooling:

- `||` separates alternatives; a version matches if any alternative matches.
- Within an alternative, comparators separated by commas or whitespace must
  all match.
- Operators: bare or `=`/`==`, `!=`, `>`, `>=`/`=>`, `<`, `<=`/`=<`,
  `~`/`~>` (patch-level range), `^` (compatible range).
- `A - B` is an inclusive range.
- `x`, `X` and `*` are wildcards. A missing minor or patch in a constraint is
  a wildcard too, so `13` means `13.x`.

Versions are ordered by SemVer 2.0 precedence, build metadata is ignored,
and a pre-release version only matches an alternative that itself names a
pre-release.
"""
import operator
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

import semver

from ..core.exceptions import InvalidConstraint, InvalidVersion

_IDENT = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

_VERSION_RE = re.compile(
    rf"^v?(?P<major>0|[1-9]\d*)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    rf"(?:-(?P<pre>{_IDENT}))?(?:\+(?P<build>{_IDENT}))?$"
)

_PART = r"\d+|[xX*]"
_CONSTRAINT_VERSION = (
    rf"v?(?P<major>{_PART})(?:\.(?P<minor>{_PART}))?(?:\.(?P<patch>{_PART}))?"
    rf"(?:-(?P<pre>{_IDENT}))?(?:\+{_IDENT})?"
)
_COMPARATOR_RE = re.compile(
    rf"\s*(?P<op>!=|>=|=>|<=|=<|==|=|>|<|~>|~|\^)?\s*{_CONSTRAINT_VERSION}\s*"
)
_HYPHEN_RE = re.compile(r"(?P<low>[^\s,]+)\s+-\s+(?P<high>[^\s,]+)")

_OPERATOR_ALIASES = {"": "=", "==": "=", "=>": ">=", "=<": "<=", "~>": "~"}

_COMPARISONS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

_ZERO = semver.Version(0, 0, 0)

Parts = Tuple[Optional[int], Optional[int], Optional[int], Optional[str]]


@dataclass(frozen=True)
class Comparator:
    """A single `<op> <version>` test.

    With `upper` set, the comparator matches versions outside the half-open
    range `[version, upper)`, which is how `!=1.2.x` is expressed.
    """

    op: str
    version: semver.Version
    upper: Optional[semver.Version] = None

    def __call__(self, version: semver.Version) -> bool:
        if self.upper is not None:
            return not (version.compare(self.version) >= 0 and version.compare(self.upper) < 0)
        return _COMPARISONS[self.op](version.compare(self.version), 0)


@dataclass(frozen=True)
class ComparatorSet:
    """One `||` alternative: every comparator must match."""

    comparators: Tuple[Comparator, ...] = ()

    @property
    def allows_prerelease(self) -> bool:
        return any(c.version.prerelease for c in self.comparators)

    def contains(self, version: semver.Version) -> bool:
        if version.prerelease and not self.allows_prerelease:
            return False
        return all(comparator(version) for comparator in self.comparators)


def parse_version(version: str) -> semver.Version:
    """Parses a semantic version string.

    Args:
        version (str): A version such as "13.4.1", "v13.4.1-beta.1" or
            "3.4.13-gs1". A missing minor or patch defaults to 0.

    Returns:
        semver.Version: The parsed version.

    Raises:
        InvalidVersion: If `version` is not a semantic version.
    """
    match = _VERSION_RE.match(version.strip()) if isinstance(version, str) else None
    if not match:
        raise InvalidVersion(f"release names must be valid semver: {version!r}", str(version))
    return _to_version(
        int(match.group("major")),
        int(match.group("minor") or 0),
        int(match.group("patch") or 0),
        match.group("pre"),
        match.group("build"),
        error=InvalidVersion,
        source=version,
    )


def matches(version: str, constraint: str) -> bool:
    """Reports whether `version` satisfies the constraint pattern `constraint`.

    The same check is used to select releases by name pattern and to test
    component versions against a requested minimum.

    Args:
        version (str): A concrete semantic version.
        constraint (str): A semver constraint expression, e.g. ">=13.0.0, <14.0.0".

    Returns:
        bool: True if the version satisfies the constraint.

    Raises:
        InvalidConstraint: If the constraint cannot be parsed.
        InvalidVersion: If the version cannot be parsed.
    """
    alternatives = parse_constraint(constraint)
    parsed = parse_version(version)
    return any(alternative.contains(parsed) for alternative in alternatives)


@lru_cache(maxsize=1024)
def parse_constraint(constraint: str) -> Tuple[ComparatorSet, ...]:
    """Translates a constraint expression into one comparator set per alternative.

    Raises:
        InvalidConstraint: If any part of the expression is not understood.
    """
    if not isinstance(constraint, str) or not constraint.strip():
        raise InvalidConstraint(
            f"release names for requests must be valid semver constraints: {constraint!r}",
            str(constraint),
        )

    alternatives = []
    for alternative in constraint.split("||"):
        comparators: List[Comparator] = []
        for part in _HYPHEN_RE.sub(lambda m: f">={m.group('low')} <={m.group('high')}", alternative).split(","):
            comparators.extend(_parse_comparators(part, constraint))
        alternatives.append(ComparatorSet(tuple(comparators)))
    return tuple(alternatives)


def _parse_comparators(text: str, constraint: str) -> List[Comparator]:
    """Parses a run of whitespace-separated comparators."""
    if not text.strip():
        raise InvalidConstraint(f"invalid semver constraint {constraint!r}: empty comparator", constraint)

    comparators = []
    pos = 0
    while pos < len(text):
        match = _COMPARATOR_RE.match(text, pos)
        if not match or match.end() == pos:
            raise InvalidConstraint(
                f"invalid semver constraint {constraint!r}: cannot parse {text[pos:].strip()!r}",
                constraint,
            )
        op = match.group("op") or ""
        parts = (
            _wildcard_int(match.group("major")),
            _wildcard_int(match.group("minor")),
            _wildcard_int(match.group("patch")),
            match.group("pre"),
        )
        comparators.extend(_to_comparators(_OPERATOR_ALIASES.get(op, op), parts, constraint))
        pos = match.end()
    return comparators


def _wildcard_int(part: Optional[str]) -> Optional[int]:
    if part is None or part in ("x", "X", "*"):
        return None
    return int(part)


def _to_comparators(op: str, parts: Parts, constraint: str) -> List[Comparator]:
    major, minor, patch, pre = parts
    # Anything after the first wildcard is a wildcard too.
    if major is None:
        minor = patch = None
    elif minor is None:
        patch = None

    if major is None:
        if op in ("=", ">=", "<=", "~", "^"):
            return []
        # Nothing is below 0.0.0 once pre-releases are excluded.
        return [Comparator("<", _ZERO)]

    floor = _to_version(major, minor or 0, patch or 0, pre, error=InvalidConstraint, source=constraint)
    wildcard = minor is None or patch is None
    if minor is None:
        upper = semver.Version(major + 1, 0, 0)
    else:
        upper = semver.Version(major, minor + 1, 0)

    if op == "=":
        return [Comparator(">=", floor), Comparator("<", upper)] if wildcard else [Comparator("==", floor)]
    if op == "!=":
        return [Comparator("!=", floor, upper)] if wildcard else [Comparator("!=", floor)]
    if op == ">":
        return [Comparator(">=", upper)] if wildcard else [Comparator(">", floor)]
    if op == ">=":
        return [Comparator(">=", floor)]
    if op == "<":
        return [Comparator("<", floor)]
    if op == "<=":
        return [Comparator("<", upper)] if wildcard else [Comparator("<=", floor)]
    if op == "~":
        return [Comparator(">=", floor), Comparator("<", upper)]
    if op == "^":
        if major > 0 or minor is None:
            ceiling = semver.Version(major + 1, 0, 0)
        elif minor > 0 or patch is None:
            ceiling = semver.Version(0, minor + 1, 0)
        else:
            ceiling = semver.Version(0, 0, patch + 1)
        return [Comparator(">=", floor), Comparator("<", ceiling)]
    raise InvalidConstraint(f"invalid semver constraint {constraint!r}: unknown operator {op!r}", constraint)


def _to_version(major, minor, patch, pre=None, build=None, *, error, source) -> semver.Version:
    text = f"{major}.{minor}.{patch}"
    if pre:
        text += f"-{pre}"
    if build:
        text += f"+{build}"
    try:
        return semver.Version.parse(text)
    except ValueError as e:
        raise error(f"invalid semantic version {source!r}: {e}", str(source)) from e
