"""Typed input and output variables derived from an operation."""

import json
import logging

from pydantic import BaseModel

from atomic_generator.parser.base import Operation, Parameter, Schema

from . import placeholders
from .connectors import Connector
from .models import Variable, VariableProperties
from .naming import human_readable_name
from .options import GenerationOptions

logger = logging.getLogger(__name__)

INPUT_PREFIX = "Input - "
QUERY_PREFIX = "Query - "
OUTPUT_PREFIX = "Output - "

IGNORE_FLAG = "variable_workflow_$ignoreIfExistKSUID"
STATUS_MESSAGE = "variable_workflow_$StatusMessageKSUID"
STATUS_CODE = "variable_workflow_$StatusCodeKSUID"
ERROR_MESSAGE = "variable_workflow_$ErrorMessageKSUID"

CREATE_OR_UPDATE = ("POST", "PUT", "PATCH")


def is_create_style(method: str) -> bool:
    return method.upper() == "POST"


def is_create_or_update(method: str) -> bool:
    return method.upper() in CREATE_OR_UPDATE


def query_allow_set(operation_id: str, options: GenerationOptions, connector: Connector) -> set[str] | None:
    """Query parameters to expose, or None for all of them.

    An allow-list always admits `q`, the free-text filter of list endpoints.
    """
    allowed = options.query_params.get(operation_id) or connector.default_query_filters.get(operation_id)
    cleaned = {v.strip() for v in allowed or [] if v.strip()}
    if not cleaned:
        return None
    cleaned.add("q")
    return cleaned


def body_properties(schema: Schema) -> Schema | None:
    """The object schema whose properties make up the request body."""
    if schema.type == "object" and schema.properties:
        return schema
    if schema.type == "array" and schema.items is not None and schema.items.type == "object" and schema.items.properties:
        return schema.items
    return None


RESERVED_OUTPUT_NAMES = ("Result", "Status Message", "Status Code", "Error Message")


def response_fields(response_schema: Schema) -> list[str]:
    """Sorted response properties that get an output variable and an extraction query.

    A property is skipped when its display name or token is already taken,
    either by an earlier property or by a fixed output.
    """
    if response_schema.type != "object":
        return []
    names, tokens, fields = set(RESERVED_OUTPUT_NAMES), set(), []
    for name in sorted(response_schema.properties):
        display, token = human_readable_name(name), placeholders.output_variable(name)
        if display in names or token in tokens:
            logger.debug("response field %s skipped, %s already taken", name, display)
            continue
        names.add(display)
        tokens.add(token)
        fields.append(name)
    return fields


class VariableSet(BaseModel):
    inputs: list[Variable] = []
    outputs: list[Variable] = []  # one per extracted response field
    query_params: list[Parameter] = []
    query_allow_set: set[str] | None = None

    def all(self) -> list[Variable]:
        return self.inputs + self.outputs + fixed_output_variables()


class VariableSynthesizer:
    """Builds the workflow variables for one operation."""

    def __init__(self, connector: Connector, options: GenerationOptions):
        self.connector = connector
        self.options = options

    def synthesize(self, operation: Operation, response_schema: Schema) -> VariableSet:
        result = VariableSet(query_allow_set=query_allow_set(operation.operation_id, self.options, self.connector))

        for param in operation.parameters:
            if param.location not in ("path", "query"):
                continue
            if param.location == "query" and result.query_allow_set is not None:
                if param.name not in result.query_allow_set:
                    logger.debug("query parameter %s filtered out of %s", param.name, operation.operation_id)
                    continue
            if _add_unique(result.inputs, self.parameter_variable(param)) and param.location == "query":
                result.query_params.append(param)

        if self.options.support_idempotency:
            result.inputs.append(ignore_flag_variable(operation.method))

        body = body_properties(operation.request_body)
        if body is not None:
            for name in sorted(body.properties):
                _add_unique(result.inputs, self.body_variable(name, body.properties[name], name in body.required))

        if not is_create_or_update(operation.method):
            for name in response_fields(response_schema):
                result.outputs.append(output_variable(name, response_schema.properties[name]))

        return result

    def parameter_variable(self, param: Parameter) -> Variable:
        # Path and query values are spliced into the URL, so they stay text.
        if param.location == "path":
            name = INPUT_PREFIX + human_readable_name(param.name)
            required, visible = True, False
        else:
            name = QUERY_PREFIX + human_readable_name(param.name)
            required, visible = param.required, True
        return Variable(
            schema_id="datatype.string",
            properties=VariableProperties(
                value="",
                scope="input",
                name=name,
                type="datatype.string",
                description=param.description,
                is_required=required,
                variable_string_format="text",
                display_on_wizard=visible,
            ),
            unique_name=placeholders.input_variable(param.name),
        )

    def body_variable(self, name: str, schema: Schema, required: bool) -> Variable:
        description = schema.description
        if schema.type == "string" and schema.enum:
            description += " Valid options are: " + ", ".join(str(v) for v in schema.enum) + "."

        data_type, value, string_format = "datatype.string", "", "text"
        if schema.type in ("integer", "number"):
            data_type, value, string_format = "datatype.integer", 0, ""
        elif schema.type == "boolean":
            data_type, value, string_format = "datatype.boolean", False, ""
        elif schema.type == "array":
            value, string_format = json.dumps([]), "json"
        elif schema.type == "object":
            value, string_format = json.dumps({}), "json"

        if self.options.stringify_body_inputs and schema.type in ("integer", "number", "boolean"):
            data_type, value, string_format = "datatype.string", "", "text"

        return Variable(
            schema_id=data_type,
            properties=VariableProperties(
                value=value,
                scope="input",
                name=INPUT_PREFIX + human_readable_name(name),
                type=data_type,
                description=description,
                is_required=required,
                variable_string_format=string_format,
                display_on_wizard=True,
            ),
            unique_name=placeholders.input_variable(name),
        )


def _add_unique(variables: list[Variable], variable: Variable) -> bool:
    """Append unless a variable with the same token or display name exists."""
    for existing in variables:
        if existing.unique_name == variable.unique_name or existing.name == variable.name:
            logger.debug("duplicate variable %s skipped", variable.name)
            return False
    variables.append(variable)
    return True


def ignore_flag_variable(method: str) -> Variable:
    name = "Input - Ignore If Exists" if is_create_style(method) else "Input - Ignore If Does Not Exists"
    return Variable(
        schema_id="datatype.boolean",
        properties=VariableProperties(
            value=False,
            scope="input",
            name=name,
            type="datatype.boolean",
            description=(
                "When enabled, the workflow will be marked as successful "
                "if the same operation has been completed before."
            ),
        ),
        unique_name=IGNORE_FLAG,
    )


def output_variable(name: str, schema: Schema) -> Variable:
    is_boolean = schema.type == "boolean"
    data_type = "datatype.boolean" if is_boolean else "datatype.string"
    return Variable(
        schema_id=data_type,
        properties=VariableProperties(
            value=False if is_boolean else "",
            scope="output",
            name=OUTPUT_PREFIX + human_readable_name(name),
            type=data_type,
            description=schema.description,
            variable_string_format="text",
        ),
        unique_name=placeholders.output_variable(name),
    )


def fixed_output_variables() -> list[Variable]:
    """Status message, status code and error message, present in every workflow."""
    return [
        Variable(
            schema_id="datatype.string",
            properties=VariableProperties(
                value="",
                scope="output",
                name="Output - Status Message",
                type="datatype.string",
                description="The HTTP status message of the API response.",
                variable_string_format="text",
            ),
            unique_name=STATUS_MESSAGE,
        ),
        Variable(
            schema_id="datatype.integer",
            properties=VariableProperties(
                value=0,
                scope="output",
                name="Output - Status Code",
                type="datatype.integer",
                description="The HTTP status code of the API response.",
            ),
            unique_name=STATUS_CODE,
        ),
        Variable(
            schema_id="datatype.string",
            properties=VariableProperties(
                value="",
                scope="output",
                name="Output - Error Message",
                type="datatype.string",
                description="The HTTP error message of the API response.",
                variable_string_format="text",
            ),
            unique_name=ERROR_MESSAGE,
        ),
    ]
