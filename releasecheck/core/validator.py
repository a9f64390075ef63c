"""Handles the core validation pipeline for releasecheck.

This module orchestrates the validation of a release tree, which includes:
1.  Discovering all available `BaseValidator` implementations.
2.  Instantiating the enabled validators for a provider.
3.  Running them concurrently against the provider's releases.
4.  Aggregating the results.
"""

import os
import pkgutil
import inspect
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Dict, Any, Optional, Type

from .config import Config
from .base_validator import BaseValidator
from ..utils.filesystem import Filesystem
from .. import validators as validators_package

# Initialize a logger for this module.
logger = logging.getLogger(__name__)


def discover_validators() -> List[Type[BaseValidator]]:
    """Discovers all validator classes within the `releasecheck.validators` module.

    This function iterates through the modules in the `validators` package,
    inspects their members, and collects all classes defined there that are
    subclasses of `BaseValidator` (excluding `BaseValidator` itself).

    Returns:
        List[Type[BaseValidator]]: A list of the discovered validator classes.
    """
    validators = []
    path = os.path.dirname(validators_package.__file__)

    for _, name, _ in pkgutil.iter_modules([path]):
        try:
            module = __import__(f"releasecheck.validators.{name}", fromlist=["*"])
            for _, item in inspect.getmembers(module, inspect.isclass):
                if issubclass(item, BaseValidator) and item is not BaseValidator and item.__module__ == module.__name__:
                    validators.append(item)
        except ImportError as e:
            logger.warning(f"Could not import validator module {name}: {e}")
    return validators


def make_filesystem(config: Config, root: Optional[str] = None) -> Filesystem:
    """Creates the filesystem collaborator for the configured release tree.

    Args:
        config (Config): The application's configuration object.
        root (Optional[str]): Overrides the configured tree root.

    Returns:
        Filesystem: Read access to the release tree.
    """
    return Filesystem(Path(root or config.get("root", ".")), release_filename=config.get("files.release", "release.yaml"))


def validate_provider(provider: str, config: Config, filesystem: Optional[Filesystem] = None) -> Dict[str, Any]:
    """Runs all enabled validators over the releases of one provider.

    Args:
        provider (str): The provider directory to validate (e.g. "aws").
        config (Config): The application's configuration object.
        filesystem (Optional[Filesystem]): The release tree. Defaults to the
            configured root.

    Returns:
        Dict[str, Any]: A dictionary containing the aggregated validation
        results, including errors, warnings, and detailed validator outputs.

    Raises:
        ParseError: If the provider's requests file is malformed.
        ReleaseLoadError: If a release manifest cannot be read.
    """
    filesystem = filesystem or make_filesystem(config)
    logger.info(f"Validating provider: {provider}, root: {filesystem.root}")

    # 1. Discover and instantiate all enabled validators.
    all_validators = discover_validators()
    enabled_validators = [
        v(provider, filesystem, config)
        for v in all_validators
        if config.is_validator_enabled(v.name)
    ]
    logger.debug(f"Enabled validators: {', '.join(v.name for v in enabled_validators)}")

    # 2. Run validators concurrently; they only read the tree.
    max_workers = max(1, int(config.get("max_workers", 6)))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        validator_results = list(executor.map(lambda v: v.validate(), enabled_validators))

    # 3. Aggregate results.
    aggregated_errors = [err for res in validator_results for err in res.get("errors", [])]
    aggregated_warnings = [warn for res in validator_results for warn in res.get("warnings", [])]

    return {
        "provider": provider,
        "errors": aggregated_errors,
        "warnings": aggregated_warnings,
        "validator_results": validator_results,
    }


def validate_tree(providers: List[str], config: Config, filesystem: Optional[Filesystem] = None) -> List[Dict[str, Any]]:
    """Validates several providers of the same tree, in order.

    Args:
        providers (List[str]): The providers to validate.
        config (Config): The application's configuration object.
        filesystem (Optional[Filesystem]): The release tree.

    Returns:
        List[Dict[str, Any]]: One result dictionary per provider.
    """
    filesystem = filesystem or make_filesystem(config)
    return [validate_provider(provider, config, filesystem) for provider in providers]
