"""Per-generation configuration threaded through every pipeline stage."""

from typing import Optional

from pydantic import BaseModel


class GenerationOptions(BaseModel):
    """Everything that varies between two generations of the same operation."""

    connector: str = "meraki"  # meraki / netbox
    support_idempotency: bool = False
    idempotency_condition: str = ""  # error message regex, or status code
    category_id: str = ""
    category_name: str = ""
    platform: Optional[str] = None  # None -> connector display name
    stringify_body_inputs: bool = False
    query_params: dict[str, list[str]] = {}  # {operationId: allowed query params}
    body_params: dict[str, list[str]] = {}  # {operationId: allowed body properties}
    acronyms: list[str] = []

    def body_allow_set(self, operation_id: str) -> set[str] | None:
        allowed = {p.strip() for p in self.body_params.get(operation_id, []) if p.strip()}
        return allowed or None


def clean_param_list(values: list[str], always: tuple[str, ...] = ()) -> list[str]:
    """Strip, drop blanks, de-duplicate and sort a parameter name list."""
    cleaned = {v.strip() for v in values if v and v.strip()}
    cleaned.update(always)
    return sorted(cleaned)
