"""Compliance checking of a release against the requests that apply to it."""
from dataclasses import dataclass
from typing import Iterable, Tuple

from ..core.release import ReleaseSnapshot
from .matcher import matches
from .resolver import resolve
from .store import RequestSpecification, VersionRequest


@dataclass(frozen=True)
class UnsatisfiedEntry:
    """A request the release does not meet.

    `actual` is the version the release ships, or an empty string when
    neither its components nor its apps contain the requested name.
    """

    requested_name: str
    requested_constraint: str
    actual: str = ""

    def __str__(self) -> str:
        return f"requested: {self.requested_name}: {self.requested_constraint} \tactual: {self.actual}"


@dataclass(frozen=True)
class ComplianceVerdict:
    """The outcome of checking one release. No entries means compliant."""

    release: str
    unsatisfied: Tuple[UnsatisfiedEntry, ...] = ()

    @property
    def compliant(self) -> bool:
        return not self.unsatisfied

    def message(self) -> str:
        """Renders the verdict as a human-readable report."""
        if self.compliant:
            return f"Release {self.release} meets the requested version requirements."
        entries = ",\n".join(str(entry) for entry in self.unsatisfied)
        return f"Release {self.release} does not meet the requested version requirements:\n{entries}"


def check(release: ReleaseSnapshot, spec: RequestSpecification) -> ComplianceVerdict:
    """Checks that an active release ships every version requested for it.

    A request is satisfied if either the release's component or its app of
    the requested name matches the requested constraint. Inactive releases
    are not checked and always come back compliant.

    Args:
        release (ReleaseSnapshot): The release to check.
        spec (RequestSpecification): The loaded requests specification.

    Returns:
        ComplianceVerdict: Every unsatisfied request, in source order.

    Raises:
        InvalidConstraint: If a constraint touched by the check is malformed.
        InvalidVersion: If the release name, or a shipped version under
            test, is not a semantic version.
    """
    if not release.active:
        return ComplianceVerdict(release=release.name)

    unsatisfied = []
    for request in resolve(release.name, spec):
        components_satisfied, component_version = _list_satisfies(request, release.components)
        apps_satisfied, app_version = _list_satisfies(request, release.apps)
        if components_satisfied or apps_satisfied:
            continue
        unsatisfied.append(
            UnsatisfiedEntry(
                requested_name=request.name,
                requested_constraint=request.version,
                actual=component_version or app_version,
            )
        )
    return ComplianceVerdict(release=release.name, unsatisfied=tuple(unsatisfied))


def _list_satisfies(request: VersionRequest, entries: Iterable) -> Tuple[bool, str]:
    """Tests the first entry named like the request.

    Returns:
        Tuple[bool, str]: Whether the request is satisfied, and the version
        of the entry found ("" if there is none).
    """
    for entry in entries:
        if entry.name == request.name:
            # Only the first entry with this name counts.
            return matches(entry.version, request.version), entry.version
    return False, ""
