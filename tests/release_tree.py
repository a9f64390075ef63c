"""Builds release trees on disk for tests."""
from pathlib import Path
from typing import Dict, List, Optional

import yaml

BASE_URL = "https://github.com/giantswarm/releases/tree/master"

DEFAULT_REQUESTS = """
releases:
- name: ">= 13.0.0"
  requests:
  - name: etcd
    version: ">= 3.4.0"
    issue: https://github.com/giantswarm/roadmap/issues/1
    except:
    - releaseVersion: "13.2.0"
      reason: known issue
"""


def release_manifest(
    name: str,
    state: str = "active",
    components: Optional[List[Dict]] = None,
    apps: Optional[List[Dict]] = None,
    date: Optional[str] = "2020-10-01T12:00:00Z",
) -> Dict:
    if components is None:
        components = [
            {"name": "release-operator", "version": name.lstrip("v")},
            {"name": "etcd", "version": "3.4.13"},
        ]
    if apps is None:
        apps = [{"name": "cert-manager", "version": "2.3.0", "componentVersion": "1.0.0"}]
    spec = {"apps": apps, "components": components, "state": state}
    if date is not None:
        spec["date"] = date
    return {
        "apiVersion": "release.giantswarm.io/v1alpha1",
        "kind": "Release",
        "metadata": {"name": name},
        "spec": spec,
    }


def write_yaml(path: Path, document) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")


def write_release(root: Path, provider: str, manifest: Dict, archived: bool = False, notes: bool = True) -> Path:
    name = manifest["metadata"]["name"]
    release_dir = root / provider / ("archived" if archived else "") / name
    write_yaml(release_dir / "release.yaml", manifest)
    if not archived:
        write_yaml(release_dir / "kustomization.yaml", {"resources": ["release.yaml"]})
    if notes:
        (release_dir / "README.md").write_text(
            f"# :zap: Release {name} for {provider.upper()} :zap:\n\nNotes.\n", encoding="utf-8"
        )
    return release_dir


def build_tree(
    root: Path,
    provider: str = "aws",
    releases: Optional[List[Dict]] = None,
    archived: Optional[List[Dict]] = None,
    requests: Optional[str] = DEFAULT_REQUESTS,
) -> Path:
    """Writes a tree that passes every validator."""
    root = Path(root)
    releases = releases if releases is not None else [release_manifest("v13.0.0"), release_manifest("v13.1.0")]
    archived = archived or []

    for manifest in releases:
        write_release(root, provider, manifest)
    for manifest in archived:
        write_release(root, provider, manifest, archived=True)

    names = [m["metadata"]["name"] for m in releases]
    write_yaml(root / provider / "kustomization.yaml", {"resources": names})
    if requests is not None:
        (root / provider / "requests.yaml").write_text(requests, encoding="utf-8")

    links = [f"- [{n}]({BASE_URL}/{provider}/{n})" for n in names]
    links += [f"- [{m['metadata']['name']}]({BASE_URL}/{provider}/archived/{m['metadata']['name']})" for m in archived]
    (root / "README.md").write_text("# Releases\n\n" + "\n".join(links) + "\n", encoding="utf-8")
    return root
