"""OpenAPI 3.x document parser.

Parses the operations of an OpenAPI document into Operation models and
looks them up by operationId or by endpoint path.
"""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from atomic_generator.errors import OperationNotFoundError, PathNotFoundError, SpecError

from .base import OpenApiSpec, Operation, Parameter, PathItem, Schema
from .detect import load_document

logger = logging.getLogger(__name__)

METHODS = ("get", "post", "put", "patch", "delete")


def parse_openapi(file_path: Path) -> OpenApiSpec:
    """Parse an OpenAPI file (JSON or YAML) into an OpenApiSpec."""
    try:
        doc = load_document(file_path)
    except OSError as e:
        raise SpecError(f"failed to read OpenAPI file {file_path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SpecError(f"failed to interpret OpenAPI file {file_path}: {e}") from e

    if not isinstance(doc, dict):
        raise SpecError(f"OpenAPI file {file_path} does not contain a document object")
    return parse_openapi_document(doc)


def parse_openapi_document(doc: dict) -> OpenApiSpec:
    """Build an OpenApiSpec from an already loaded document."""
    try:
        return _build_spec(doc)
    except ValidationError as e:
        raise SpecError(f"invalid OpenAPI document: {e}") from e


def _build_spec(doc: dict) -> OpenApiSpec:
    paths = {}
    for path, methods in (doc.get("paths") or {}).items():
        if not isinstance(methods, dict):
            continue
        operations = {}
        for method in METHODS:
            operation = methods.get(method)
            if isinstance(operation, dict):
                operations[method] = _parse_operation(operation, path, method.upper())
        paths[path] = PathItem(**operations)

    components = doc.get("components") or {}
    schemas = {
        name: Schema.model_validate(schema)
        for name, schema in (components.get("schemas") or {}).items()
        if isinstance(schema, dict)
    }
    return OpenApiSpec(paths=paths, schemas=schemas)


def find_operation(spec: OpenApiSpec, operation_id: str) -> Operation:
    """Return the operation declaring `operation_id`."""
    for path in sorted(spec.paths):
        for operation in spec.paths[path].operations().values():
            if operation.operation_id == operation_id:
                return operation
    raise OperationNotFoundError(operation_id)


def normalize_endpoint_path(endpoint: str) -> str:
    """Normalise a configured endpoint to `/api/<...>/` form."""
    endpoint = endpoint.strip()
    if not endpoint:
        return ""
    if not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    if not endpoint.startswith("/api/"):
        if endpoint.startswith("/api"):
            endpoint = "/api" + endpoint[len("/api"):]
        else:
            endpoint = "/api" + endpoint
    if not endpoint.endswith("/"):
        endpoint += "/"
    return endpoint


def find_path_item(spec: OpenApiSpec, endpoint: str) -> tuple[str, PathItem]:
    """Find the path item for `endpoint`, with or without a trailing slash."""
    if endpoint.endswith("/"):
        candidates = [endpoint, endpoint.rstrip("/")]
    else:
        candidates = [endpoint, endpoint + "/"]
    for candidate in candidates:
        if candidate in spec.paths:
            return candidate, spec.paths[candidate]
    raise PathNotFoundError(endpoint)


def _parse_operation(operation: dict, path: str, method: str) -> Operation:
    return Operation(
        operation_id=operation.get("operationId") or "",
        description=operation.get("description") or "",
        parameters=_parse_parameters(operation.get("parameters") or []),
        request_body=_json_schema(operation.get("requestBody")),
        responses=_parse_responses(operation.get("responses") or {}),
        path=path,
        method=method,
    )


def _parse_parameters(params: list[dict]) -> list[Parameter]:
    result = []
    for p in params:
        if not isinstance(p, dict) or "name" not in p:
            # $ref'd parameters are not resolved
            logger.debug("skipping parameter without a name: %s", p)
            continue
        result.append(Parameter.model_validate(p))
    return result


def _json_schema(container: dict | None) -> Schema:
    """Return the application/json schema of a requestBody or response."""
    if not container:
        return Schema()
    content = container.get("content") or {}
    media = content.get("application/json") or {}
    return Schema.model_validate(media.get("schema") or {})


def _parse_responses(responses: dict) -> dict[str, Schema]:
    result = {}
    for status_code, resp in responses.items():
        result[str(status_code)] = _json_schema(resp if isinstance(resp, dict) else None)
    return result
