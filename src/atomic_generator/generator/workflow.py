"""Single-operation pipeline: OpenAPI operation -> rendered workflow JSON."""

import json
import logging
from typing import Callable, Optional

from atomic_generator.parser.base import OpenApiSpec, Operation, Schema
from atomic_generator.parser.swagger import find_operation

from .actions import ActionGraphBuilder, select_success_code
from .connectors import Connector, get_connector
from .models import Atomic, Category, Target, Workflow, WorkflowDocument, WorkflowProperties
from .naming import operation_display_name
from .options import GenerationOptions
from .placeholders import PlaceholderAllocator
from .postprocess import apply_platform_prefix, capitalize_acronyms
from .resolver import apply_schema_overrides, filter_schema_properties, resolve_operation
from .variables import VariableSynthesizer, query_allow_set

logger = logging.getLogger(__name__)


class WorkflowGenerator:
    """Generates the workflow of one operation with a fixed set of options.

    The shared OpenApiSpec is never modified; each generation works on its
    own copy of the operation.
    """

    def __init__(
        self,
        spec: OpenApiSpec,
        options: Optional[GenerationOptions] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.spec = spec
        self.options = options or GenerationOptions()
        self.connector: Connector = get_connector(self.options.connector)
        self.id_factory = id_factory

    def prepare_operation(self, operation_id: str) -> Operation:
        """Look up, copy, resolve and filter the operation."""
        operation = find_operation(self.spec, operation_id).model_copy(deep=True)
        resolve_operation(operation, self.spec.schemas)
        apply_schema_overrides(operation)

        allowed = self.options.body_allow_set(operation_id)
        if allowed and not operation.request_body.is_empty():
            logger.debug("restricting %s body to %s", operation_id, sorted(allowed))
            operation.request_body = filter_schema_properties(operation.request_body, allowed)
        return operation

    def build(self, operation_id: str) -> WorkflowDocument:
        operation = self.prepare_operation(operation_id)
        display_name = operation_display_name(operation.operation_id, operation.path, operation.method)

        success_code, response_schema = select_success_code(operation.responses)
        logger.debug("%s success code: %r", operation_id, success_code)
        if self._is_paginated_list(operation):
            response_schema = _with_pagination(response_schema, self.connector.pagination_outputs)

        variables = VariableSynthesizer(self.connector, self.options).synthesize(operation, response_schema)
        actions = ActionGraphBuilder(self.connector, self.options).build(
            operation, variables, response_schema, success_code, display_name
        )

        categories = {}
        if self.options.category_id.strip() and self.options.category_name.strip():
            categories[self.options.category_id] = Category(
                unique_name=self.options.category_id,
                name=self.options.category_name,
                title=self.options.category_name,
            )

        document = WorkflowDocument(
            workflow=Workflow(
                name=display_name,
                title=display_name,
                variables=variables.all(),
                properties=WorkflowProperties(
                    atomic=Atomic(atomic_group=self.connector.atomic_group),
                    description=operation.description,
                    display_name=display_name,
                    target=Target(target_type=self.connector.target_type),
                ),
                actions=actions,
                categories=sorted(categories),
            ),
            categories=dict(sorted(categories.items())),
        )
        capitalize_acronyms(document, self.options.acronyms, self.connector.action_type)
        apply_platform_prefix(document, self.options.platform or self.connector.platform_display_name)
        return document

    def render(self, operation_id: str) -> str:
        """Generate the workflow JSON with all placeholders resolved."""
        document = self.build(operation_id)
        text = json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False)
        return PlaceholderAllocator(self.id_factory).allocate(text)

    def _is_paginated_list(self, operation: Operation) -> bool:
        if not self.connector.pagination_outputs or operation.method.upper() != "GET":
            return False
        allowed = query_allow_set(operation.operation_id, self.options, self.connector)
        if allowed is not None:
            return True
        return any(p.location == "query" for p in operation.parameters)


def _with_pagination(schema: Schema, outputs: dict[str, Schema]) -> Schema:
    properties = dict(schema.properties)
    for name, definition in outputs.items():
        properties.setdefault(name, definition)
    return schema.model_copy(update={"type": schema.type or "object", "properties": properties})


def generate_workflow(
    spec: OpenApiSpec,
    operation_id: str,
    options: Optional[GenerationOptions] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> str:
    """Render the workflow JSON for `operation_id`."""
    return WorkflowGenerator(spec, options, id_factory).render(operation_id)
