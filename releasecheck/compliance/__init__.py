"""Request satisfaction engine.

Loads a requests specification, selects the requests that apply to a
release by semver-constraint matching, and checks a release's components and
apps against them.
"""
from .checker import ComplianceVerdict, UnsatisfiedEntry, check
from .matcher import matches, parse_constraint, parse_version
from .resolver import resolve
from .store import (
    ReleasePattern,
    RequestException,
    RequestSpecification,
    VersionRequest,
    iter_constraints,
    load_requests,
    validate_constraints,
)

__all__ = [
    "ComplianceVerdict",
    "UnsatisfiedEntry",
    "check",
    "matches",
    "parse_constraint",
    "parse_version",
    "resolve",
    "ReleasePattern",
    "RequestException",
    "RequestSpecification",
    "VersionRequest",
    "iter_constraints",
    "load_requests",
    "validate_constraints",
]
