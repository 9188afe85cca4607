"""Data models for the parts of an OpenAPI document the generator consumes.

Only parameters, the JSON request body, JSON responses and `$ref`
composition through `components.schemas` are modelled; everything else in
the document is ignored.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Schema(BaseModel):
    """A JSON Schema node, possibly pointing at a named component."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ref: str = Field("", alias="$ref")
    type: str = ""  # string / integer / number / boolean / array / object
    properties: dict[str, "Schema"] = {}
    items: Optional["Schema"] = None
    description: str = ""
    enum: list[Any] = []
    required: list[str] = []

    @field_validator("type", mode="before")
    @classmethod
    def _first_concrete_type(cls, value):
        # OpenAPI 3.1 allows `type: [string, "null"]`
        if isinstance(value, list):
            value = next((t for t in value if t != "null"), "")
        return value or ""

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value):
        return value or ""

    @field_validator("required", mode="before")
    @classmethod
    def _required_list(cls, value):
        # `required: true` on a property schema is invalid OpenAPI but common
        return value if isinstance(value, list) else []

    def is_empty(self) -> bool:
        return not (self.type or self.properties or self.items or self.ref)


class Parameter(BaseModel):
    """A single operation parameter (path, query, header or cookie)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    location: str = Field("query", alias="in")  # path / query / header / cookie
    description: str = ""
    value_schema: Schema = Field(default_factory=Schema, alias="schema")
    required: bool = False

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value):
        return value or ""


class Operation(BaseModel):
    """One HTTP method bound to one path."""

    operation_id: str = ""
    description: str = ""
    parameters: list[Parameter] = []
    request_body: Schema = Field(default_factory=Schema)
    responses: dict[str, Schema] = {}  # {status_code: application/json schema}
    path: str = ""  # /api/dcim/devices/{id}/
    method: str = ""  # GET / POST / PUT / PATCH / DELETE


class PathItem(BaseModel):
    get: Optional[Operation] = None
    post: Optional[Operation] = None
    put: Optional[Operation] = None
    patch: Optional[Operation] = None
    delete: Optional[Operation] = None

    def operations(self) -> dict[str, Operation]:
        """Return the declared operations keyed by upper-case method."""
        result = {}
        for method in ("get", "post", "put", "patch", "delete"):
            operation = getattr(self, method)
            if operation is not None:
                result[method.upper()] = operation
        return result


class OpenApiSpec(BaseModel):
    paths: dict[str, PathItem] = {}
    schemas: dict[str, Schema] = {}  # components.schemas
