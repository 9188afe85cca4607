"""Schema resolution: `$ref` expansion, operation overrides and allow-list pruning."""

import logging

from atomic_generator.parser.base import Operation, Schema

logger = logging.getLogger(__name__)


def resolve_schema(schema: Schema, components: dict[str, Schema]) -> Schema:
    """Return `schema` with every reachable `$ref` inlined.

    A reference already being expanded higher up the current path is left
    unresolved, so cyclic schemas are truncated at the repeat instead of
    recursing forever. Unknown references pass through unchanged.
    """
    return _resolve(schema, components, set())


def _resolve(schema: Schema, components: dict[str, Schema], active: set[str]) -> Schema:
    if schema.ref:
        name = ref_name(schema.ref)
        if name:
            if name in active:
                logger.debug("cyclic reference to %s left unresolved", name)
                return schema
            target = components.get(name)
            if target is not None:
                active.add(name)
                try:
                    return _resolve(target, components, active)
                finally:
                    active.discard(name)
            logger.debug("reference %s has no matching component", schema.ref)

    updates = {}
    if schema.items is not None:
        updates["items"] = _resolve(schema.items, components, active)
    if schema.properties:
        updates["properties"] = {
            key: _resolve(prop, components, active) for key, prop in schema.properties.items()
        }
    return schema.model_copy(update=updates) if updates else schema


def ref_name(ref: str) -> str:
    """`#/components/schemas/Device` -> `Device`."""
    return ref.rsplit("/", 1)[-1] if ref else ""


def resolve_operation(operation: Operation, components: dict[str, Schema]) -> None:
    """Resolve parameter, request body and response schemas in place."""
    for param in operation.parameters:
        param.value_schema = resolve_schema(param.value_schema, components)
    operation.request_body = resolve_schema(operation.request_body, components)
    operation.responses = {
        code: resolve_schema(schema, components) for code, schema in operation.responses.items()
    }


def apply_schema_overrides(operation: Operation) -> None:
    """Patch known-incomplete request bodies for specific operations."""
    if operation.operation_id == "ipam_prefixes_available_prefixes_create":
        _available_prefix_overrides(operation)


def _available_prefix_overrides(operation: Operation) -> None:
    body = operation.request_body
    if body.type != "array" or body.items is None:
        return
    items = body.items.model_copy(deep=True)
    if not items.type:
        items.type = "object"
    if "prefix_length" not in items.properties:
        items.properties = {
            **items.properties,
            "prefix_length": Schema(
                type="integer",
                description="Desired prefix length (mask) to allocate under the selected parent prefix.",
            ),
        }
    items.required = [name for name in items.required if name != "prefix"]
    operation.request_body = body.model_copy(update={"items": items})


def filter_schema_properties(schema: Schema, allowed: set[str]) -> Schema:
    """Drop object properties (and required entries) not named in `allowed`.

    Nested objects and array items are pruned with the same allow-list.
    """
    updates = {}
    if schema.type == "object":
        updates["properties"] = {
            key: filter_schema_properties(prop, allowed)
            for key, prop in schema.properties.items()
            if key in allowed
        }
        updates["required"] = [name for name in schema.required if name in allowed]
    if schema.type == "array" and schema.items is not None:
        updates["items"] = filter_schema_properties(schema.items, allowed)
    return schema.model_copy(update=updates) if updates else schema
