"""Selection of the version requests that apply to a release."""
import logging
from typing import List

from .matcher import matches
from .store import RequestSpecification, VersionRequest

logger = logging.getLogger(__name__)


def resolve(release_name: str, spec: RequestSpecification) -> List[VersionRequest]:
    """Finds every request that applies to the named release.

    Release patterns are walked in file order. For each pattern matching the
    release name, its requests are taken in order, skipping any request with
    an exception whose `releaseVersion` pattern matches the release name. A
    request nested under two matching patterns appears twice; each copy is
    checked on its own.

    Args:
        release_name (str): The release name, e.g. "v13.4.1".
        spec (RequestSpecification): The loaded requests specification.

    Returns:
        List[VersionRequest]: The applicable requests in source order.

    Raises:
        InvalidConstraint: If a pattern evaluated during the walk is malformed.
        InvalidVersion: If the release name is not a semantic version.
    """
    applicable: List[VersionRequest] = []
    for pattern in spec.releases:
        if not matches(release_name, pattern.name):
            continue

        for request in pattern.requests:
            # Every exception is evaluated so that a malformed one is never skipped.
            excluded = [e for e in request.exceptions if matches(release_name, e.release_version)]
            if excluded:
                logger.debug(f"Release {release_name} is excepted from {request.name} {request.version}: {excluded[0].reason}")
                continue
            applicable.append(request)
    return applicable
