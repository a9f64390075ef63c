"""Checks that every release ships release notes naming its version."""
from ..core.base_validator import BaseValidator


class ReleaseNotesValidator(BaseValidator):
    """Checks the first line of each release's README for its version."""

    name = "ReleaseNotes"
    category = "Documentation"
    description = "Checks that each release has release notes mentioning its version on the first line."

    def _validate(self) -> None:
        readme = self.filename("readme", "README.md")
        for release in self.releases():
            path = self.filesystem.release_dir(self.provider, release.name) / readme
            try:
                content = self.filesystem.read_file(path).decode("utf-8")
            except FileNotFoundError:
                self.add_error(f"Missing release notes {path} for {self.provider} release {release.name}.")
                continue

            first_line = content.split("\n", 1)[0]
            version = release.name[1:] if release.name.startswith("v") else release.name
            if version not in first_line:
                self.add_error(
                    f"Expected release notes for {self.provider} release {release.name} "
                    "to contain the release version on the first line."
                )
