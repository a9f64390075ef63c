"""
Base validator class that all release tree checks inherit from.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Any, Optional, TYPE_CHECKING

from .exceptions import ParseError, ReleaseLoadError
from .release import ReleaseSnapshot

if TYPE_CHECKING:
    from .config import Config
    from ..utils.filesystem import Filesystem

logger = logging.getLogger(__name__)


class BaseValidator(ABC):
    """Abstract base class for all release tree validators.

    All validators must inherit from this class and implement the `_validate`
    method. This ensures a consistent interface for the validation pipeline,
    allowing the main orchestrator to process a list of different checks
    polymorphically.

    Attributes:
        name (str): The display name of the validator.
        category (str): A category for grouping validators (e.g., "Structure").
        description (str): A brief explanation of what the validator checks.
    """

    name: str = "UnnamedValidator"
    category: str = "General"
    description: str = "No description provided"

    def __init__(self, provider: str, filesystem: "Filesystem", config: "Config") -> None:
        """Initializes the validator with the provider and its release tree.

        Args:
            provider (str): The provider whose releases are validated.
            filesystem (Filesystem): Read access to the release tree.
            config (Config): The application's configuration object.
        """
        self.provider = provider
        self.filesystem = filesystem
        self.config = config
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.info: Dict[str, Any] = {}
        self._releases: Dict[bool, List[ReleaseSnapshot]] = {}

    def validate(self) -> Dict[str, Any]:
        """Performs the validation check and returns the results.

        This method serves as a public interface, wrapping the internal
        `_validate` method so that an unexpected exception in one validator
        is recorded as an error instead of crashing the pipeline. A
        `ParseError` or `ReleaseLoadError` is re-raised: no check can be
        trusted when the inputs themselves cannot be read.

        Returns:
            Dict[str, Any]: A dictionary containing the validation results.

        Raises:
            ParseError: If the requests specification is malformed.
            ReleaseLoadError: If a release manifest is malformed.
        """
        try:
            self._validate()
        except (ParseError, ReleaseLoadError):
            raise
        except Exception as e:
            logger.exception(f"Validator {self.name} failed for {self.provider}")
            self.add_error(f"Validator {self.name} failed: {str(e)}")
        return self.result()

    @abstractmethod
    def _validate(self) -> None:
        """Abstract method for implementing the core validation logic.

        Subclasses must override this method to perform their specific
        check. The implementation should use the `add_error`, `add_warning`,
        and `add_info` methods to record its findings.
        """
        raise NotImplementedError("Subclasses must implement _validate()")

    def result(self) -> Dict[str, Any]:
        """Returns the validation results in a standardized dictionary format.

        Returns:
            Dict[str, Any]: A dictionary containing the validator's name,
            category, description, and any findings.
        """
        return {
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info,
        }

    def add_error(self, message: str) -> None:
        """Adds an error message to the validation results.

        An error fails the run in "block" mode.

        Args:
            message (str): The error message to add.
        """
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Adds a warning message to the validation results.

        Args:
            message (str): The warning message to add.
        """
        self.warnings.append(message)

    def add_info(self, key: str, value: Any) -> None:
        """Adds informational data to the validation results.

        Args:
            key (str): The key for the informational data.
            value (Any): The value of the informational data.
        """
        self.info[key] = value

    def releases(self, archived: bool = False) -> List[ReleaseSnapshot]:
        """Returns the provider's releases, loading them once per validator."""
        if archived not in self._releases:
            self._releases[archived] = self.filesystem.find_releases(self.provider, archived=archived)
        return self._releases[archived]

    def filename(self, kind: str, default: Optional[str] = None) -> str:
        """Looks up a configured file name (e.g. "requests" -> "requests.yaml")."""
        return self.config.get(f"files.{kind}", default)

    def provider_path(self, *parts: str) -> Path:
        """Builds a path relative to the tree root inside the provider directory."""
        return Path(self.provider, *parts)
