"""Script actions that assemble query strings and JSON bodies at runtime.

Connectors whose call action takes a fixed endpoint/body argument cannot
template structured input themselves, so a small Python 3 script runs
first and the call action references its output.
"""

from pydantic import BaseModel

from atomic_generator.parser.base import Parameter, Schema

from . import placeholders
from .models import Action
from .naming import script_identifiers

QUERY_PREP = placeholders.activity("QueryPrep")
BODY_PREP = placeholders.activity("BodyPrep")

TYPED = ("array", "object", "integer", "number", "boolean")


class BodyField(BaseModel):
    name: str
    required: bool
    type: str


def _script_action(unique_name: str, title: str, script: str, query: str, query_name: str, arguments=None) -> Action:
    properties = {
        "action_timeout": 180,
        "continue_on_failure": False,
        "display_name": title,
        "script": script,
    }
    if arguments is not None:
        properties["script_arguments"] = arguments
    properties["script_queries"] = [
        {"script_query": query, "script_query_name": query_name, "script_query_type": "string"}
    ]
    properties["skip_execution"] = False
    return Action(
        unique_name=unique_name,
        name="Execute Python Script",
        title=title,
        type="python3.script",
        properties=properties,
    )


def build_query_prep(query_params: list[Parameter]) -> tuple[Action | None, str]:
    """Script joining non-empty query inputs into one URL-encoded string.

    Returns the action and the reference to its `queryStr` output, or
    (None, "") when there is nothing to assemble.
    """
    if not query_params:
        return None, ""

    py_vars = script_identifiers([p.name for p in query_params])
    lines = ["import sys", "import urllib.parse", ""]
    if len(py_vars) == 1:
        lines.append(f"({py_vars[0]},) = sys.argv[1:2]")
    else:
        lines.append(f"({', '.join(py_vars)}) = sys.argv[1:{len(py_vars) + 1}]")
    lines += ["", 'queryStr = ""', "first = True", ""]
    for param, py_var in zip(query_params, py_vars):
        key = repr(param.name + "=")
        lines += [
            f"if {py_var} != '':",
            "    if not first:",
            "        queryStr += '&'",
            f"    queryStr += {key} + urllib.parse.quote_plus(str({py_var}))",
            "    first = False",
            "",
        ]
    lines.append("print(queryStr)")

    arguments = [placeholders.workflow_input(placeholders.input_variable(p.name)) for p in query_params]
    action = _script_action(
        QUERY_PREP, "Prepare Query Params", "\n".join(lines) + "\n", "queryStr", "queryStr", arguments
    )
    return action, placeholders.activity_output(QUERY_PREP, "script_queries.queryStr")


def body_fields(schema: Schema) -> list[BodyField]:
    """Fields of an object body (or of the object items of an array body), sorted."""
    if schema.type == "object":
        target = schema
    elif schema.type == "array" and schema.items is not None and schema.items.type == "object":
        target = schema.items
    else:
        return []
    return [
        BodyField(name=name, required=name in target.required, type=target.properties[name].type)
        for name in sorted(target.properties)
    ]


def _coercion(field_type: str, py_var: str) -> str:
    if field_type in ("array", "object"):
        return f"json.loads({py_var}) if {py_var} != '' else None"
    if field_type == "integer":
        return f"int({py_var}) if {py_var} != '' else None"
    if field_type == "number":
        return f"float({py_var}) if {py_var} != '' else None"
    if field_type == "boolean":
        return f"{py_var}.lower() == 'true' if {py_var} != '' else None"
    return py_var


def build_body_prep(body_schema: Schema, operation_id: str) -> tuple[Action, str]:
    """Script building the JSON request body from the body input variables.

    Returns the action and the reference to its `request_body` output.
    """
    fields = body_fields(body_schema)
    py_vars = script_identifiers([f.name for f in fields])

    lines = ["import json", ""]
    for field, py_var in zip(fields, py_vars):
        reference = placeholders.workflow_input(placeholders.input_variable(field.name))
        lines.append(f"{py_var} = '{reference}'")
    lines += ["", "request_body_object = {}"]

    for field, py_var in zip(fields, py_vars):
        key = f"request_body_object[{field.name!r}]"
        value = _coercion(field.type, py_var)
        typed = field.type in TYPED
        if field.required and not typed:
            lines.append(f"{key} = {py_var}")
        elif field.required:
            lines += [f"if {py_var} != '':", f"    {key} = {value}"]
        elif typed:
            lines += [
                f"if {py_var} != '':",
                f"    value = {value}",
                "    if value is not None:",
                f"        {key} = value",
            ]
        else:
            lines += [f"if {py_var} != '':", f"    {key} = {py_var}"]

    if body_schema.type == "array" or "_available_" in operation_id:
        lines.append("request_body_string = json.dumps([request_body_object])")
    else:
        lines.append("request_body_string = json.dumps(request_body_object)")

    action = _script_action(
        BODY_PREP, "Prepare Request Body", "\n".join(lines) + "\n", "request_body_string", "request_body"
    )
    return action, placeholders.activity_output(BODY_PREP, "script_queries.request_body")
