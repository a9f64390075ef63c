"""Checks that active releases ship the component versions requested for them.

The provider's requests file declares, per release name pattern, minimum
versions for components or apps, with per-release exceptions. Every active
release is checked; each unmet request is reported as an error.
"""
import logging

from ..compliance import check, load_requests, validate_constraints
from ..core.base_validator import BaseValidator
from ..core.exceptions import InvalidConstraint, InvalidSemver, ParseError

logger = logging.getLogger(__name__)


class RequestsValidator(BaseValidator):
    """Validates active releases against the provider's version requests."""

    name = "Requests"
    category = "Compliance"
    description = "Checks that active releases satisfy the requested component and app versions."

    def _validate(self) -> None:
        """Loads the requests file and checks every active release against it."""
        requests_path = self.provider_path(self.filename("requests", "requests.yaml"))
        try:
            data = self.filesystem.read_file(requests_path)
        except FileNotFoundError:
            self.add_error(f"Missing requests file {requests_path}.")
            return

        try:
            spec = load_requests(data)
        except ParseError as e:
            raise ParseError(f"{requests_path}: {e}") from e

        if self.config.get("requests.eager_syntax_check", False):
            try:
                validate_constraints(spec)
            except InvalidConstraint as e:
                self.add_error(f"{requests_path}: {e}")
                return

        checked = 0
        for release in self.releases():
            if not release.active:
                continue
            checked += 1
            try:
                verdict = check(release, spec)
            except InvalidSemver as e:
                self.add_error(f"Could not check {self.provider} release {release.name} against {requests_path}: {e}")
                continue
            if not verdict.compliant:
                logger.info(f"{self.provider} release {release.name} has {len(verdict.unsatisfied)} unsatisfied request(s)")
                self.add_error(verdict.message())

        self.add_info("Release Patterns", len(spec.releases))
        self.add_info("Checked Releases", checked)
