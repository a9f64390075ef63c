"""Validates release manifests against the `Release` custom resource schema.

The schema mirrors the OpenAPI v3 validation of the `release.giantswarm.io`
`Release` CRD, so a manifest that passes here will be accepted by the API
server when the release is applied.
"""
from datetime import date, datetime
from typing import Any, Dict

import jsonschema

from ..core.base_validator import BaseValidator

_SEMVER = (
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

RELEASE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["metadata", "spec"],
    "properties": {
        "apiVersion": {"type": "string"},
        "kind": {"type": "string", "enum": ["Release"]},
        "metadata": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "pattern": r"^v" + _SEMVER[1:]},
            },
        },
        "spec": {
            "type": "object",
            "required": ["apps", "components", "date", "state"],
            "properties": {
                "apps": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["name", "version"],
                        "properties": {
                            "componentVersion": {"type": "string", "minLength": 1},
                            "name": {"type": "string", "minLength": 1},
                            "version": {"type": "string", "pattern": _SEMVER},
                        },
                    },
                },
                "components": {
                    "type": "array",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "required": ["name", "version"],
                        "properties": {
                            "catalog": {"type": "string"},
                            "name": {"type": "string", "minLength": 1},
                            "reference": {"type": "string"},
                            "releaseOperatorDeploy": {"type": "boolean"},
                            "version": {"type": "string", "pattern": _SEMVER},
                        },
                    },
                },
                "date": {"type": "string", "format": "date-time"},
                "endOfLifeDate": {"type": "string", "format": "date-time"},
                "notice": {"type": "string"},
                "state": {"type": "string", "pattern": r"^(active|deprecated|wip)$"},
            },
        },
    },
}


class CRDSchemaValidator(BaseValidator):
    """Validates each release manifest against the `Release` CRD schema."""

    name = "CRDSchema"
    category = "Structure"
    description = "Validates release manifests against the Release custom resource schema."

    def __init__(self, *args, **kwargs) -> None:
        """Initializes the CRDSchemaValidator."""
        super().__init__(*args, **kwargs)
        self.schema_validator = jsonschema.Draft7Validator(RELEASE_SCHEMA, format_checker=jsonschema.FormatChecker())

    def _validate(self) -> None:
        for release in self.releases():
            document = _to_json_compatible(release.manifest)
            errors = sorted(self.schema_validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])
            if not errors:
                continue
            details = "\n".join(
                f"validation error {i}: {'.'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}"
                for i, e in enumerate(errors)
            )
            self.add_error(f"Invalid {self.provider} release {release.name}:\n{details}")


def _to_json_compatible(value: Any) -> Any:
    """Converts YAML timestamps back to the strings a JSON decoder would see."""
    if isinstance(value, dict):
        return {str(k): _to_json_compatible(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_json_compatible(v) for v in value]
    if isinstance(value, datetime):
        text = value.isoformat()
        return text.replace("+00:00", "Z") if value.tzinfo else text + "Z"
    if isinstance(value, date):
        return value.isoformat()
    return value
