"""Loading of requests specifications.

A requests file lists release name patterns, each with the component or app
versions every matching release must ship::

    releases:
    - name: ">= 13.0.0"
      requests:
      - name: etcd
        version: ">= 3.4.0"
        issue: https://github.com/example/roadmap/issues/1
        except:
        - releaseVersion: "13.2.0"
          reason: known issue

Parsing is strict: unknown keys, wrongly typed values and missing `name` or
`version` fields are rejected with `ParseError` when the file is loaded. Only
constraint syntax is deferred: it is checked when a pattern is evaluated,
unless `validate_constraints` is called explicitly.
"""
import logging
from typing import Iterator, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.exceptions import InvalidConstraint, ParseError
from .matcher import parse_constraint

logger = logging.getLogger(__name__)


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class RequestException(_StrictModel):
    """Exempts releases whose name matches `release_version` from a request."""

    release_version: str = Field(alias="releaseVersion")
    reason: str = ""


class VersionRequest(_StrictModel):
    """Requires component or app `name` to satisfy the constraint `version`."""

    name: str
    version: str
    issue: str = ""
    exceptions: Tuple[RequestException, ...] = Field(default=(), alias="except")


class ReleasePattern(_StrictModel):
    """Applies `requests` to every release whose name matches `name`."""

    name: str
    requests: Tuple[VersionRequest, ...] = ()


class RequestSpecification(_StrictModel):
    """The parsed contents of a requests file."""

    releases: Tuple[ReleasePattern, ...] = ()


def load_requests(data: Union[bytes, str]) -> RequestSpecification:
    """Parses a requests specification.

    Args:
        data (Union[bytes, str]): The raw YAML document.

    Returns:
        RequestSpecification: The parsed specification. An empty document
        yields an empty specification.

    Raises:
        ParseError: If the document is not valid YAML, or does not follow the
            requests schema.
    """
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ParseError(f"requests file is not valid YAML: {e}") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ParseError(f"requests file must be a mapping, got {type(document).__name__}")

    try:
        spec = RequestSpecification.model_validate(document)
    except ValidationError as e:
        raise ParseError(f"requests file does not match the expected schema:\n{e}") from e

    logger.debug(f"Loaded {len(spec.releases)} release pattern(s) with {sum(1 for _ in iter_constraints(spec))} constraint(s).")
    return spec


def iter_constraints(spec: RequestSpecification) -> Iterator[Tuple[str, str]]:
    """Yields every constraint in the specification with a description of where it is.

    Args:
        spec (RequestSpecification): The specification to walk.

    Yields:
        Tuple[str, str]: A (location, constraint) pair for each release
        pattern, requested version and exception pattern, in source order.
    """
    for pattern in spec.releases:
        yield f"release pattern {pattern.name!r}", pattern.name
        for request in pattern.requests:
            where = f"request {request.name!r} under release pattern {pattern.name!r}"
            yield where, request.version
            for exception in request.exceptions:
                yield f"exception of {where}", exception.release_version


def validate_constraints(spec: RequestSpecification) -> None:
    """Checks the syntax of every constraint in the specification up front.

    Raises:
        InvalidConstraint: For the first malformed constraint, naming where
            it appears.
    """
    for where, constraint in iter_constraints(spec):
        try:
            parse_constraint(constraint)
        except InvalidConstraint as e:
            raise InvalidConstraint(f"{where}: {e}", constraint) from e
