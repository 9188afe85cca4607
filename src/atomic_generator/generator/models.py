"""Models of the generated workflow document."""

from typing import Any, Optional, Union

from pydantic import BaseModel


class VariableProperties(BaseModel):
    value: Any = ""
    scope: str  # input / output
    name: str
    type: str  # datatype.string / datatype.integer / datatype.boolean
    description: str = ""
    is_required: bool = False
    variable_string_format: str = ""  # text / json / ""
    display_on_wizard: bool = False
    is_invisible: bool = False


class Variable(BaseModel):
    schema_id: str
    properties: VariableProperties
    unique_name: str  # variable_workflow_$<name>KSUID
    object_type: str = "variable_workflow"

    @property
    def name(self) -> str:
        return self.properties.name

    @property
    def scope(self) -> str:
        return self.properties.scope


class Condition(BaseModel):
    left_operand: Union["Condition", bool, int, str, None] = ""
    operator: str
    right_operand: Union["Condition", bool, int, str, None] = ""


class BlockProperties(BaseModel):
    condition: Condition
    continue_on_failure: bool = False
    display_name: str
    skip_execution: bool = False


class Block(BaseModel):
    """One labelled branch of a conditional action."""

    unique_name: str
    name: str = "Condition Branch"
    title: str
    type: str = "logic.condition_block"
    base_type: str = "activity"
    properties: BlockProperties
    object_type: str = "definition_activity"
    actions: list["Action"] = []


class Action(BaseModel):
    unique_name: str
    name: str
    title: str
    type: str
    base_type: str = "activity"
    properties: dict[str, Any] = {}
    object_type: str = "definition_activity"
    blocks: list[Block] = []


class Atomic(BaseModel):
    atomic_group: str
    is_atomic: bool = True


class RuntimeUser(BaseModel):
    target_default: bool = True


class Target(BaseModel):
    target_type: str
    specify_on_workflow_start: bool = True


class WorkflowProperties(BaseModel):
    atomic: Atomic
    description: str = ""
    display_name: str
    runtime_user: RuntimeUser = RuntimeUser()
    target: Target


class Workflow(BaseModel):
    unique_name: str = "definition_workflow_$WorkflowKSUID"
    name: str
    title: str
    type: str = "generic.workflow"
    base_type: str = "workflow"
    variables: list[Variable] = []
    properties: WorkflowProperties
    object_type: str = "definition_workflow"
    actions: list[Action] = []
    categories: list[str] = []


class Category(BaseModel):
    unique_name: str
    name: str
    title: str
    type: str = "basic.category"
    base_type: str = "category"
    category_type: str = "custom"
    object_type: str = "category"


class WorkflowDocument(BaseModel):
    workflow: Workflow
    categories: dict[str, Category] = {}

    def find_action(self, action_type: str) -> Optional[Action]:
        """Return the first top-level action of `action_type`."""
        return next((a for a in self.workflow.actions if a.type == action_type), None)


Condition.model_rebuild()
Block.model_rebuild()
