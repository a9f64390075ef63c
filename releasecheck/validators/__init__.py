"""A collection of validators for release manifest trees.

This package contains all the individual validator implementations that are
dynamically discovered and run by the core validation engine. Each module in
this package should contain one or more classes that inherit from
`releasecheck.core.base_validator.BaseValidator`.
"""
from .crd_validator import CRDSchemaValidator
from .kustomization_validator import KustomizationValidator
from .readme_validator import ReadmeValidator
from .release_notes_validator import ReleaseNotesValidator
from .requests_validator import RequestsValidator
from .uniqueness_validator import UniquenessValidator
