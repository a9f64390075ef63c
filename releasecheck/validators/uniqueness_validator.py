"""Checks that a provider's releases form a consistent release index.

Release tooling indexes releases by version and by content. This validator
flags:
-   Two releases with the same version.
-   Two releases shipping exactly the same components and apps, which would
    make one of them redundant.
-   Releases without a release date.
-   Component or app versions that are not semantic versions.
"""
from typing import Dict, FrozenSet, Tuple

from ..compliance.matcher import parse_version
from ..core.base_validator import BaseValidator
from ..core.exceptions import InvalidVersion
from ..core.release import ReleaseSnapshot


class UniquenessValidator(BaseValidator):
    """Validates the release index of a provider for duplicates."""

    name = "Uniqueness"
    category = "Structure"
    description = "Checks that releases are unique by version and by content, and carry a release date."

    def _validate(self) -> None:
        """Indexes the releases by version and by content."""
        by_version: Dict[str, str] = {}
        by_content: Dict[FrozenSet[Tuple[str, str, str]], str] = {}

        for release in self.releases():
            try:
                version = str(parse_version(release.name))
            except InvalidVersion as e:
                self.add_error(f"Release {release.name} has an invalid version: {e}")
                continue

            if version in by_version:
                self.add_error(f"Release {release.name} duplicates the version of release {by_version[version]}.")
            else:
                by_version[version] = release.name

            content = self._content(release)
            if content in by_content:
                self.add_error(
                    f"Release {release.name} has the same components and apps as release {by_content[content]}."
                )
            else:
                by_content[content] = release.name

            if release.date is None:
                self.add_error(f"Release {release.name} has no release date.")

        self.add_info("Unique Releases", len(by_version))

    def _content(self, release: ReleaseSnapshot) -> FrozenSet[Tuple[str, str, str]]:
        """Builds a comparable set of what the release ships, checking each version."""
        content = set()
        for component in release.components:
            self._check_version(release, "component", component.name, component.version)
            content.add(("component", component.name, component.version))
        for app in release.apps:
            self._check_version(release, "app", app.name, app.version)
            content.add(("app", app.name, app.version))
        return frozenset(content)

    def _check_version(self, release: ReleaseSnapshot, kind: str, name: str, version: str) -> None:
        try:
            parse_version(version)
        except InvalidVersion:
            self.add_error(f"Release {release.name} {kind} {name} has an invalid version {version!r}.")
