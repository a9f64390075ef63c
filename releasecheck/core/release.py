"""In-memory representation of a release manifest.

A release manifest is a `Release` custom resource stored as
`<provider>/<release>/release.yaml`. Only the fields the validators read are
lifted into typed attributes; the raw document is kept in `manifest` for
schema validation.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional, Tuple

from .exceptions import ReleaseLoadError

ACTIVE_STATE = "active"


@dataclass(frozen=True)
class ReleaseComponent:
    """A versioned internal component of a release."""

    name: str
    version: str
    reference: Optional[str] = None
    catalog: Optional[str] = None
    release_operator_deploy: Optional[bool] = None


@dataclass(frozen=True)
class ReleaseApp:
    """A packaged app shipped with a release."""

    name: str
    version: str
    component_version: Optional[str] = None


@dataclass(frozen=True)
class ReleaseSnapshot:
    """A read-only view of one release.

    Attributes:
        name (str): The release name, which is also its version (e.g. "v13.4.1").
        state (str): The release state ("active", "deprecated", "wip", ...).
        components (Tuple[ReleaseComponent, ...]): Components in manifest order.
        apps (Tuple[ReleaseApp, ...]): Apps in manifest order.
        date (Optional[datetime]): The release date, if the manifest sets one.
        manifest (Dict[str, Any]): The raw manifest document.
    """

    name: str
    state: str = ACTIVE_STATE
    components: Tuple[ReleaseComponent, ...] = ()
    apps: Tuple[ReleaseApp, ...] = ()
    date: Optional[datetime] = None
    manifest: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def active(self) -> bool:
        return self.state == ACTIVE_STATE

    @classmethod
    def from_manifest(cls, manifest: Any) -> "ReleaseSnapshot":
        """Builds a snapshot from a parsed `Release` document.

        Args:
            manifest (Any): The result of loading `release.yaml`.

        Returns:
            ReleaseSnapshot: The snapshot for the release.

        Raises:
            ReleaseLoadError: If the document has no release name or its
                component or app lists are malformed.
        """
        if not isinstance(manifest, dict):
            raise ReleaseLoadError("release manifest must be a mapping")

        metadata = manifest.get("metadata") or {}
        name = metadata.get("name") if isinstance(metadata, dict) else None
        if not isinstance(name, str) or not name:
            raise ReleaseLoadError("release manifest has no metadata.name")

        spec = manifest.get("spec") or {}
        if not isinstance(spec, dict):
            raise ReleaseLoadError(f"release {name}: spec must be a mapping")

        try:
            components = tuple(
                ReleaseComponent(
                    name=str(c["name"]),
                    version=str(c["version"]),
                    reference=c.get("reference"),
                    catalog=c.get("catalog"),
                    release_operator_deploy=c.get("releaseOperatorDeploy"),
                )
                for c in spec.get("components") or []
            )
            apps = tuple(
                ReleaseApp(
                    name=str(a["name"]),
                    version=str(a["version"]),
                    component_version=a.get("componentVersion"),
                )
                for a in spec.get("apps") or []
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ReleaseLoadError(f"release {name}: malformed component or app entry: {e}") from e

        return cls(
            name=name,
            state=str(spec.get("state", "")),
            components=components,
            apps=apps,
            date=_parse_date(spec.get("date")),
            manifest=manifest,
        )


def _parse_date(value: Any) -> Optional[datetime]:
    """Normalizes a YAML date field into a timezone-aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
