"""Provides read access to a release manifest tree.

The tree is laid out as::

    <root>/README.md
    <root>/<provider>/requests.yaml
    <root>/<provider>/kustomization.yaml
    <root>/<provider>/<release>/release.yaml
    <root>/<provider>/<release>/README.md
    <root>/<provider>/<release>/kustomization.yaml
    <root>/<provider>/archived/<release>/release.yaml

Paths handed to `read_file` and `exists` are relative to the root.
"""
import logging
from pathlib import Path
from typing import List, Union

import yaml

from ..compliance.matcher import parse_version
from ..core.exceptions import InvalidVersion, ReleaseLoadError
from ..core.release import ReleaseSnapshot

logger = logging.getLogger(__name__)

ARCHIVED_DIRNAME = "archived"
RELEASE_FILENAME = "release.yaml"


class Filesystem:
    """Reads releases and auxiliary files below a root directory.

    Attributes:
        root (Path): The root of the release tree.
        release_filename (str): The name of the manifest inside each release
            directory.
    """

    def __init__(self, root: Union[str, Path], release_filename: str = RELEASE_FILENAME) -> None:
        self.root = Path(root)
        self.release_filename = release_filename

    def read_file(self, path: Union[str, Path]) -> bytes:
        """Reads a file from the tree.

        Args:
            path (Union[str, Path]): The path relative to the root.

        Returns:
            bytes: The file contents.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        return (self.root / path).read_bytes()

    def exists(self, path: Union[str, Path]) -> bool:
        return (self.root / path).is_file()

    def release_dir(self, provider: str, release: str, archived: bool = False) -> Path:
        """Returns the directory of a release, relative to the root."""
        if archived:
            return Path(provider) / ARCHIVED_DIRNAME / release
        return Path(provider) / release

    def list_providers(self) -> List[str]:
        """Lists the provider directories, i.e. those holding release directories."""
        if not self.root.is_dir():
            return []
        providers = []
        for child in sorted(self.root.iterdir()):
            if child.is_dir() and any(d.is_dir() and (d / self.release_filename).is_file() for d in child.iterdir()):
                providers.append(child.name)
        return providers

    def find_releases(self, provider: str, archived: bool = False) -> List[ReleaseSnapshot]:
        """Loads every release of a provider.

        Args:
            provider (str): The provider directory name (e.g. "aws").
            archived (bool): If True, load the archived releases instead of
                the current ones.

        Returns:
            List[ReleaseSnapshot]: The releases, ordered by version. A missing
            provider or archive directory yields an empty list.

        Raises:
            ReleaseLoadError: If a release manifest cannot be parsed, or its
                name does not match its directory.
        """
        base = self.root / provider
        if archived:
            base = base / ARCHIVED_DIRNAME
        if not base.is_dir():
            logger.info(f"No release directory at {base}")
            return []

        releases = []
        for release_dir in sorted(base.iterdir()):
            manifest_path = release_dir / self.release_filename
            if not release_dir.is_dir() or not manifest_path.is_file():
                continue
            releases.append(self._load_release(manifest_path, release_dir.name))

        logger.debug(f"Found {len(releases)} {'archived ' if archived else ''}release(s) for {provider}")
        return sorted(releases, key=_release_sort_key)

    def _load_release(self, manifest_path: Path, dirname: str) -> ReleaseSnapshot:
        try:
            with open(manifest_path, "r", encoding="utf-8") as f:
                manifest = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ReleaseLoadError(f"could not read {manifest_path}: {e}") from e

        try:
            release = ReleaseSnapshot.from_manifest(manifest)
        except ReleaseLoadError as e:
            raise ReleaseLoadError(f"{manifest_path}: {e}") from e

        if release.name != dirname:
            raise ReleaseLoadError(f"{manifest_path}: release name {release.name} does not match directory {dirname}")
        return release


def _release_sort_key(release: ReleaseSnapshot):
    # Unparseable names sort last, by name, and are reported by the validators.
    try:
        return (0, parse_version(release.name), release.name)
    except InvalidVersion:
        return (1, None, release.name)
