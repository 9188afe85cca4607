"""Symbolic placeholder tokens and their replacement by unique identifiers.

Components refer to each other through tokens such as `$ApiRequestKSUID`.
The rendered document is scanned once at the end, and every distinct token
is swapped for a freshly generated KSUID.
"""

import re
from typing import Callable, Optional

from ksuid import Ksuid

from .naming import token_name

PLACEHOLDER_PATTERN = re.compile(r"\$\w+KSUID")

WORKFLOW = "definition_workflow_$WorkflowKSUID"
API_REQUEST = "definition_activity_$ApiRequestKSUID"


def activity(token: str) -> str:
    """Unique name of a graph node, e.g. `definition_activity_$SuccessBlockKSUID`."""
    return f"definition_activity_${token}KSUID"


def input_variable(name: str) -> str:
    return f"variable_workflow_${token_name(name)}KSUID"


def output_variable(name: str) -> str:
    return f"variable_workflow_${token_name(name)}outputKSUID"


def workflow_input(unique_name: str) -> str:
    """Runtime reference to a workflow input variable."""
    return f"$workflow.{WORKFLOW}.input.{unique_name}$"


def workflow_output(unique_name: str) -> str:
    """Runtime reference to a workflow output variable or result field."""
    return f"$workflow.{WORKFLOW}.output.{unique_name}$"


def activity_output(unique_name: str, field: str) -> str:
    """Runtime reference to an output field of an action."""
    return f"$activity.{unique_name}.output.{field}$"


def new_ksuid() -> str:
    return str(Ksuid())


class PlaceholderAllocator:
    """Resolves placeholder tokens to identifiers, consistently within one run."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self.id_factory = id_factory or new_ksuid
        self.allocated: dict[str, str] = {}

    def allocate(self, text: str) -> str:
        return PLACEHOLDER_PATTERN.sub(self._identifier, text)

    def _identifier(self, match: re.Match) -> str:
        token = match.group(0)
        if token not in self.allocated:
            self.allocated[token] = self.id_factory()
        return self.allocated[token]
