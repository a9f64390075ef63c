"""Checks that kustomization files register exactly the provider's releases.

The provider kustomization must list every release directory once as a
resource and nothing else, and each release kustomization must point at the
release manifest only.
"""
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from ..core.base_validator import BaseValidator


class KustomizationFile(BaseModel):
    """The subset of a kustomization file release trees use."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    commonAnnotations: Dict[str, str] = {}
    resources: Tuple[str, ...] = ()
    transformers: Tuple[str, ...] = ()


class KustomizationValidator(BaseValidator):
    """Validates provider and release kustomization files."""

    name = "Kustomization"
    category = "Structure"
    description = "Checks that kustomization files register every release and point at its manifest."

    def _validate(self) -> None:
        """Cross-checks the provider kustomization resources with the releases on disk."""
        kustomization = self.filename("kustomization", "kustomization.yaml")
        release_file = self.filename("release", "release.yaml")

        provider_file = self._load(self.provider_path(kustomization))
        if provider_file is None:
            return

        registered = {resource: False for resource in provider_file.resources}
        for release in self.releases():
            if release.name not in registered:
                self.add_error(f"Release {release.name} not registered in {self.provider}/{kustomization}.")
            else:
                registered[release.name] = True

            release_kustomization = self._load(self.filesystem.release_dir(self.provider, release.name) / kustomization)
            if release_kustomization is None:
                continue
            if release_kustomization.resources != (release_file,):
                self.add_error(
                    f"{kustomization} for {self.provider} release {release.name} "
                    f'should contain only one resource, "{release_file}".'
                )

        for resource, found in registered.items():
            if not found:
                self.add_error(f"Release {resource} registered in {self.provider}/{kustomization} resources but not found.")

    def _load(self, path: Path) -> Optional[KustomizationFile]:
        """Reads and strictly parses a kustomization file, recording any problem."""
        try:
            document = yaml.safe_load(self.filesystem.read_file(path))
        except FileNotFoundError:
            self.add_error(f"Missing file {path}.")
            return None
        except yaml.YAMLError as e:
            self.add_error(f"{path} is not valid YAML: {e}")
            return None

        try:
            return KustomizationFile.model_validate(document or {})
        except ValidationError as e:
            self.add_error(f"{path} does not match the expected kustomization format:\n{e}")
            return None
