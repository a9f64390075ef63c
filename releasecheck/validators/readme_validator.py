"""Checks that the repository README links to every release.

The top-level README is the index of the repository. Each current release
must be linked as `<base_url>/<provider>/<release>` and each archived one as
`<base_url>/<provider>/archived/<release>`. Links to releases that are no
longer in the tree are reported as warnings.
"""
import re
from typing import Set

from ..core.base_validator import BaseValidator
from ..utils.filesystem import ARCHIVED_DIRNAME


class ReadmeValidator(BaseValidator):
    """Checks the README for links to current and archived releases."""

    name = "Readme"
    category = "Documentation"
    description = "Checks that the repository README links to every current and archived release."

    def _validate(self) -> None:
        """Looks up the link of each release in the README."""
        readme = self.filename("readme", "README.md")
        try:
            content = self.filesystem.read_file(readme).decode("utf-8")
        except FileNotFoundError:
            self.add_error(f"Missing repository README {readme}.")
            return

        base_url = self.config.get("readme.base_url", "").rstrip("/")
        for release in self.releases():
            if f"{base_url}/{self.provider}/{release.name}" not in content:
                self.add_error(f"Expected link in {readme} to {self.provider} release {release.name}.")

        archived = self.releases(archived=True)
        for release in archived:
            if f"{base_url}/{self.provider}/{ARCHIVED_DIRNAME}/{release.name}" not in content:
                self.add_error(f"Expected link in {readme} to archived {self.provider} release {release.name}.")

        self._check_stale_links(readme, content, base_url, {r.name for r in self.releases()}, {r.name for r in archived})
        self.add_info("Archived Releases", len(archived))

    def _check_stale_links(self, readme: str, content: str, base_url: str, current: Set[str], archived: Set[str]) -> None:
        """Warns about README links to releases that are not in the tree."""
        pattern = re.compile(rf"{re.escape(base_url)}/{re.escape(self.provider)}/(?:({ARCHIVED_DIRNAME})/)?([^\s)\]/#\"']+)")
        for match in pattern.finditer(content):
            is_archived, name = bool(match.group(1)), match.group(2)
            if name not in (archived if is_archived else current):
                kind = "archived " if is_archived else ""
                self.add_warning(f"{readme} links to {kind}{self.provider} release {name}, which does not exist.")
