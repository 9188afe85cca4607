"""Exceptions raised by the workflow generator.

Every fatal condition derives from GenerationError so callers (the CLI,
the batch orchestrator) can stop on a single type.
"""


class GenerationError(Exception):
    """A workflow could not be generated."""


class SpecError(GenerationError):
    """The OpenAPI document could not be read or interpreted."""


class ConfigError(GenerationError):
    """A batch, query-parameter or acronym file is missing or malformed."""


class OperationNotFoundError(GenerationError):
    def __init__(self, operation_id: str):
        super().__init__(f"operationId {operation_id} not found")
        self.operation_id = operation_id


class PathNotFoundError(GenerationError):
    def __init__(self, endpoint: str):
        super().__init__(f"path {endpoint} not found in OpenAPI spec")
        self.endpoint = endpoint


class MethodNotAvailableError(GenerationError):
    def __init__(self, method: str, path: str):
        super().__init__(f"method {method} not available for endpoint {path}")
        self.method = method
        self.path = path


class UnknownConnectorError(GenerationError):
    def __init__(self, name: str):
        super().__init__(f"unsupported connector type {name}")
        self.name = name
