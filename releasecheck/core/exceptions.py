"""Exceptions raised by releasecheck.

Structural problems (an unreadable requests file, a malformed constraint, a
broken release manifest) are raised as exceptions. Unsatisfied version
requests are not: they are returned as `ComplianceVerdict` values so that a
caller can collect every violation in a tree before deciding what to do.
"""


class ReleaseCheckError(Exception):
    """Base class for all releasecheck errors."""


class ParseError(ReleaseCheckError):
    """The requests specification is malformed or violates its schema.

    This error is fatal for a validation run: compliance cannot be checked
    against a specification that could not be read.
    """


class InvalidSemver(ReleaseCheckError):
    """Base class for semantic-version syntax errors.

    Attributes:
        value (str): The offending version or constraint text.
    """

    def __init__(self, message: str, value: str) -> None:
        super().__init__(message)
        self.value = value


class InvalidConstraint(InvalidSemver):
    """A semver constraint pattern could not be parsed."""


class InvalidVersion(InvalidSemver):
    """A version string is not a valid semantic version."""


class ReleaseLoadError(ReleaseCheckError):
    """A release manifest could not be read or does not describe a release."""
