"""Endpoint and request body templates for the API call action."""

from atomic_generator.parser.base import Parameter, Schema

from . import placeholders
from .connectors import Connector


def _input_ref(name: str) -> str:
    return placeholders.workflow_input(placeholders.input_variable(name))


def build_endpoint(
    path: str,
    path_params: list[Parameter],
    query_params: list[Parameter],
    connector: Connector,
    query_reference: str = "",
) -> str:
    """Fill the path template and attach the query string.

    Query parameters are templated one by one unless `query_reference`
    points at a pre-assembled query string, which is appended instead.
    """
    for param in path_params:
        path = path.replace("{" + param.name + "}", _input_ref(param.name))

    if query_reference:
        query_parts = [query_reference]
    else:
        query_parts = [f"{p.name}={_input_ref(p.name)}" for p in query_params]
    if query_parts:
        separator = "&" if "?" in path else "?"
        path = path + separator + "&".join(query_parts)

    base = connector.api_base_path
    if base and not path.startswith(base):
        return base + path
    return path


def build_body_template(schema: Schema, stringify: bool = False) -> str:
    """JSON body with each property bound to its input variable."""
    if schema.type == "object":
        return _object_template(schema, stringify)
    if schema.type == "array":
        if schema.items is None:
            return "[]"
        item = build_body_template(schema.items, stringify)
        return "[\n" + "\n".join("\t" + line for line in item.split("\n")) + "\n]"
    return "{\n\t\n}"


def _object_template(schema: Schema, stringify: bool) -> str:
    if not schema.properties:
        return "{\n\t\n}"
    parts = []
    for key in sorted(schema.properties):
        ref = _input_ref(key)
        prop_type = schema.properties[key].type
        if prop_type in ("array", "object"):
            value = ref
        elif prop_type in ("integer", "number", "boolean") and not stringify:
            value = ref
        else:
            value = f'"{ref}"'
        parts.append(f'"{key}":{value}')
    return "{\n\t" + ",\n\t".join(parts) + "\n}"
