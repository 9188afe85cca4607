"""Batch generation driven by a workflow config file.

Config format (YAML or JSON):

    defaults:
      query_params: [name, status]
    workflows:
      - endpoint: dcim/devices
        methods: [GET, POST]
        query_params: [site_id]
        body_params: [name, role, site]
        options:
          support_idempotency: true
          idempotency_condition: "already exists"

A bare list of workflow entries is accepted as well.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Iterator, Optional

import yaml
from pydantic import BaseModel, ValidationError

from atomic_generator.errors import ConfigError, GenerationError, MethodNotAvailableError
from atomic_generator.parser.base import OpenApiSpec
from atomic_generator.parser.detect import load_document
from atomic_generator.parser.swagger import find_path_item, normalize_endpoint_path

from .options import GenerationOptions, clean_param_list
from .workflow import WorkflowGenerator

logger = logging.getLogger(__name__)


class WorkflowOptions(BaseModel):
    support_idempotency: Optional[bool] = None
    idempotency_condition: str = ""
    category_id: str = ""
    category_name: str = ""
    platform: str = ""


class WorkflowEntry(BaseModel):
    endpoint: str = ""
    methods: list[str] = []
    query_params: list[str] = []
    body_params: list[str] = []
    options: Optional[WorkflowOptions] = None


class WorkflowDefaults(BaseModel):
    query_params: list[str] = []


class BatchConfig(BaseModel):
    defaults: WorkflowDefaults = WorkflowDefaults()
    workflows: list[WorkflowEntry] = []


class GeneratedWorkflow(BaseModel):
    operation_id: str
    method: str
    path: str
    content: str


def _load(file_path: Path, kind: str):
    try:
        return load_document(file_path)
    except OSError as e:
        raise ConfigError(f"failed to read {kind} {file_path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to parse {kind} {file_path}: {e}") from e


def load_batch_config(file_path: Path) -> BatchConfig:
    data = _load(file_path, "config file")
    if data is None:
        raise ConfigError(f"config file {file_path} is empty")
    if isinstance(data, list):
        data = {"workflows": data}
    try:
        config = BatchConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config file {file_path}: {e}") from e
    if not config.workflows:
        raise ConfigError(f"config {file_path} contains no workflows")
    return config


def load_query_param_config(file_path: Path) -> dict[str, list[str]]:
    """Read an `{operationId: [query params]}` mapping, dropping empty lists."""
    data = _load(file_path, "query params config")
    if data is None:
        return {}
    if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
        raise ConfigError(f"query params config {file_path} must map operation ids to lists")
    result = {}
    for operation_id, values in data.items():
        cleaned = clean_param_list([str(v) for v in values if v is not None])
        if cleaned:
            result[str(operation_id)] = cleaned
    return result


def entry_options(
    base: GenerationOptions,
    entry: WorkflowEntry,
    method: str,
    operation_id: str,
    default_query_params: list[str],
) -> GenerationOptions:
    """Options for one entry/method, derived from `base` without modifying it."""
    updates = {}
    if method == "GET":
        updates["query_params"] = {
            **base.query_params,
            operation_id: clean_param_list(default_query_params + entry.query_params, always=("q",)),
        }
    if method == "POST":
        body_params = clean_param_list(entry.body_params)
        if body_params:
            updates["body_params"] = {**base.body_params, operation_id: body_params}

    opts = entry.options
    if opts is not None:
        if opts.support_idempotency is not None:
            updates["support_idempotency"] = opts.support_idempotency
        for field in ("idempotency_condition", "category_id", "category_name", "platform"):
            value = getattr(opts, field)
            if value.strip():
                updates[field] = value
    return base.model_copy(update=updates)


class BatchOrchestrator:
    """Generates every workflow described by a BatchConfig.

    Each entry gets its own GenerationOptions, so allow-lists and option
    overrides of one entry cannot affect the next.
    """

    def __init__(
        self,
        spec: OpenApiSpec,
        options: Optional[GenerationOptions] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.spec = spec
        self.options = options or GenerationOptions()
        self.id_factory = id_factory

    def run(self, config: BatchConfig) -> Iterator[GeneratedWorkflow]:
        default_query_params = clean_param_list(config.defaults.query_params, always=("q",))
        for entry in config.workflows:
            yield from self.run_entry(entry, default_query_params)

    def run_entry(self, entry: WorkflowEntry, default_query_params: list[str]) -> Iterator[GeneratedWorkflow]:
        if not entry.endpoint.strip():
            raise ConfigError("workflow entry missing endpoint")
        path_key, path_item = find_path_item(self.spec, normalize_endpoint_path(entry.endpoint))

        operations = path_item.operations()
        if not operations:
            raise GenerationError(f"no operations found for endpoint {path_key}")

        if entry.methods:
            methods = [m.strip().upper() for m in entry.methods if m.strip()]
            if not methods:
                raise ConfigError(f"no valid methods specified for endpoint {entry.endpoint}")
        else:
            methods = sorted(operations)

        for method in methods:
            operation = operations.get(method)
            if operation is None:
                raise MethodNotAvailableError(method, path_key)
            if not operation.operation_id:
                raise GenerationError(f"operation id missing for {method} {path_key}")

            options = entry_options(self.options, entry, method, operation.operation_id, default_query_params)
            logger.debug("generating %s (%s %s)", operation.operation_id, method, path_key)
            content = WorkflowGenerator(self.spec, options, self.id_factory).render(operation.operation_id)
            yield GeneratedWorkflow(
                operation_id=operation.operation_id, method=method, path=path_key, content=content
            )


def write_outputs(results, output_dir: Path) -> list[Path]:
    """Write each workflow to `<output_dir>/<operationId>.json`."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for result in results:
        file_path = output_dir / f"{result.operation_id}.json"
        file_path.write_text(result.content + "\n", encoding="utf-8")
        written.append(file_path)
    return written
