"""The action graph: call the API, branch on the status code, finish.

Layout of the generated actions:

    [Prepare Query Params]        script, connectors without native templating
    [Prepare Request Body]        script, connectors without native templating
    API Request                   connector call action
    Was the Request Successful?   if/else on status_code
      <code>/Success              extract fields, set outputs, complete
      Failed                      set outputs, then either complete as failed
        Skip Errors?              ... or, with idempotency, branch again on
          Ignore If (Not) Exists  the ignore flag and the error condition
          Failed
"""

import logging
from typing import Any, Optional, Union

from atomic_generator.parser.base import Operation, Schema

from . import placeholders
from .connectors import Connector
from .models import Action, Block, BlockProperties, Condition, Variable
from .naming import human_readable_name
from .options import GenerationOptions
from .request import build_body_template, build_endpoint
from .scripts import build_body_prep, build_query_prep
from .variables import (
    ERROR_MESSAGE,
    IGNORE_FLAG,
    OUTPUT_PREFIX,
    STATUS_CODE,
    STATUS_MESSAGE,
    VariableSet,
    body_properties,
    is_create_or_update,
    is_create_style,
    response_fields,
)

logger = logging.getLogger(__name__)

SuccessCode = Optional[Union[int, str]]

DATE_FORMAT = "yyyy-MM-dd'T'HH:mm:ssZ"
WORKFLOW_RESULTS = placeholders.workflow_output("workflow_results")
WORKFLOW_RESULTS_CODE = placeholders.workflow_output("workflow_results_code")


def select_success_code(responses: dict[str, Schema]) -> tuple[SuccessCode, Schema]:
    """Pick the response treated as success.

    The lowest numeric 2xx code wins, then the lowest numeric code, then
    the first remaining key in sorted order (usually `default`). Returns
    (None, empty schema) when the operation declares no responses.
    """
    if not responses:
        return None, Schema()
    numeric = sorted(int(code) for code in responses if code.isdigit())
    two_xx = [code for code in numeric if 200 <= code < 300]
    if two_xx or numeric:
        code = (two_xx or numeric)[0]
        return code, responses[str(code)]
    key = "default" if "default" in responses else sorted(responses)[0]
    return key, responses[key]


def jsonpath_queries(response_schema: Schema, method: str) -> list[dict[str, str]]:
    """`Result` for the whole body, then one query per response property."""
    queries = [_jsonpath_query("$", "Result", "string")]
    if is_create_or_update(method):
        return queries
    for name in response_fields(response_schema):
        query_type = "boolean" if response_schema.properties[name].type == "boolean" else "string"
        queries.append(_jsonpath_query(f"$.{name}", human_readable_name(name), query_type))
    return queries


def _jsonpath_query(query: str, name: str, query_type: str) -> dict[str, str]:
    return {
        "jsonpath_query": query,
        "jsonpath_query_name": name,
        "jsonpath_query_type": query_type,
        "zdate_type_format": DATE_FORMAT,
    }


NEGATED_OPERATORS = {"eq": "ne", "ne": "eq", "mregex": "nmregex", "nmregex": "mregex"}


def negate(condition: Condition) -> Condition:
    """The comparison that holds exactly when `condition` does not."""
    return condition.model_copy(update={"operator": NEGATED_OPERATORS[condition.operator]})


def _update(variable: str, value: Any) -> dict[str, Any]:
    return {"variable_to_update": variable, "variable_value_new": value}


def _block(token: str, title: str, condition: Condition, actions: list[Action]) -> Block:
    return Block(
        unique_name=placeholders.activity(token),
        title=title,
        properties=BlockProperties(condition=condition, display_name=title),
        actions=actions,
    )


def _if_else(token: str, title: str, blocks: list[Block], description: str = "") -> Action:
    properties = {"conditions": [], "continue_on_failure": False}
    if description:
        properties["description"] = description
    properties.update(display_name=title, skip_execution=False)
    return Action(
        unique_name=placeholders.activity(token),
        name="Condition Block",
        title=title,
        type="logic.if_else",
        properties=properties,
        blocks=blocks,
    )


def _set_variables(token: str, updates: list[dict[str, Any]]) -> Action:
    return Action(
        unique_name=placeholders.activity(token),
        name="Set Variables",
        title="Set Output Variables",
        type="core.set_multiple_variables",
        properties={
            "continue_on_failure": False,
            "display_name": "Set Output Variables",
            "skip_execution": False,
            "variables_to_update": updates,
        },
    )


def _completed(token: str, succeeded: bool, result_message: str, updates: Optional[list] = None) -> Action:
    title = "Completed - Success" if succeeded else "Completed - Failed"
    properties = {
        "completion_type": "succeeded" if succeeded else "failed-completed",
        "continue_on_failure": False,
        "display_name": title,
        "result_message": result_message,
        "skip_execution": False,
    }
    if updates is not None:
        properties["variables_to_update"] = updates
    return Action(
        unique_name=placeholders.activity(token),
        name="Completed",
        title=title,
        type="logic.completed",
        properties=properties,
    )


class ActionGraphBuilder:
    """Assembles the ordered top-level actions of one workflow."""

    def __init__(self, connector: Connector, options: GenerationOptions):
        self.connector = connector
        self.options = options

    def build(
        self,
        operation: Operation,
        variables: VariableSet,
        response_schema: Schema,
        success_code: SuccessCode,
        display_name: str,
    ) -> list[Action]:
        actions = []
        method = operation.method.upper()
        has_body = body_properties(operation.request_body) is not None
        scripted = not self.connector.native_templating

        query_reference = ""
        if scripted and method == "GET" and variables.query_params:
            query_action, query_reference = build_query_prep(variables.query_params)
            actions.append(query_action)

        body = ""
        if has_body:
            if scripted and is_create_or_update(method):
                body_action, body = build_body_prep(operation.request_body, operation.operation_id)
                actions.append(body_action)
            else:
                body = build_body_template(operation.request_body, self.options.stringify_body_inputs)

        path_params = [p for p in operation.parameters if p.location == "path"]
        endpoint = build_endpoint(
            operation.path,
            path_params,
            [] if query_reference else variables.query_params,
            self.connector,
            query_reference,
        )
        actions.append(self.call_action(operation, endpoint, body, display_name))
        actions.append(self.status_split(operation, variables.outputs, response_schema, success_code))
        return actions

    def call_action(self, operation: Operation, endpoint: str, body: str, display_name: str) -> Action:
        return Action(
            unique_name=placeholders.API_REQUEST,
            name="API Request for " + display_name,
            title=display_name,
            type=self.connector.action_type,
            properties=self.connector.call_properties(
                operation.method.upper(), endpoint, body, operation, display_name
            ),
        )

    def _call_output(self, field: str) -> str:
        return placeholders.activity_output(placeholders.API_REQUEST, field)

    def status_split(
        self,
        operation: Operation,
        outputs: list[Variable],
        response_schema: Schema,
        success_code: SuccessCode,
    ) -> Action:
        if success_code is None:
            logger.debug("%s declares no responses, comparing status against an empty value", operation.operation_id)
        right_operand = "" if success_code is None else success_code
        status = self._call_output("status_code")
        success_title = f"{right_operand}/Success"

        success = _block(
            "SuccessBranch",
            success_title,
            Condition(left_operand=status, operator="eq", right_operand=right_operand),
            self.success_actions(operation, outputs, response_schema),
        )
        failure = _block(
            "FailureBranch",
            "Failed",
            Condition(left_operand=status, operator="ne", right_operand=right_operand),
            self.failure_actions(operation),
        )
        return _if_else(
            "StatusSplit",
            "Was the Request Successful?",
            [success, failure],
            description="Was The Request Successful?",
        )

    def success_actions(self, operation: Operation, outputs: list[Variable], response_schema: Schema) -> list[Action]:
        extract_name = placeholders.activity("ExtractResults")
        response_body = self._call_output(self.connector.response_body_field)

        updates = []
        if self.connector.status_message_field:
            updates.append(_update(
                placeholders.workflow_output(STATUS_MESSAGE),
                self._call_output(self.connector.status_message_field),
            ))
        updates += [
            _update(placeholders.workflow_output(STATUS_CODE), self._call_output("status_code")),
            _update(WORKFLOW_RESULTS, response_body),
            _update(WORKFLOW_RESULTS_CODE, "completed-successfully"),
        ]
        for variable in outputs:
            query_name = variable.name.removeprefix(OUTPUT_PREFIX)
            updates.append(_update(
                placeholders.workflow_output(variable.unique_name),
                placeholders.activity_output(extract_name, f"jsonpath_queries.{query_name}"),
            ))

        extract = Action(
            unique_name=extract_name,
            name="JSONPath Query",
            title="Extract API Results",
            type="corejava.jsonpathquery",
            properties={
                "action_timeout": 180,
                "continue_on_failure": True,
                "display_name": "Extract API Results",
                "input_json": response_body,
                "jsonpath_queries": jsonpath_queries(response_schema, operation.method),
                "skip_execution": False,
            },
        )
        return [
            extract,
            _set_variables("SetSuccessOutputs", updates),
            _completed("CompletedSuccess", True, WORKFLOW_RESULTS, updates),
        ]

    def failure_actions(self, operation: Operation) -> list[Action]:
        updates = [_update(placeholders.workflow_output(STATUS_CODE), self._call_output("status_code"))]
        if self.connector.status_message_field:
            updates.append(_update(
                placeholders.workflow_output(STATUS_MESSAGE),
                self._call_output(self.connector.status_message_field),
            ))
        updates += [
            _update(placeholders.workflow_output(ERROR_MESSAGE), self._call_output("error.message")),
            _update(WORKFLOW_RESULTS, self._call_output(self.connector.response_body_field)),
            _update(WORKFLOW_RESULTS_CODE, "workflow-errored"),
        ]
        actions = [_set_variables("SetFailureOutputs", updates)]
        error_message = placeholders.workflow_output(ERROR_MESSAGE)
        if self.options.support_idempotency:
            actions.append(self.tolerance_split(operation.method))
        else:
            actions.append(_completed("CompletedFailure", False, error_message))
        return actions

    def tolerance_split(self, method: str) -> Action:
        """Nested split completing successfully on a known, ignorable failure.

        The `Failed` block is the exact complement of the tolerated one:
        it fires when the ignore flag is off or the failure does not match.
        """
        condition = self.options.idempotency_condition
        if is_create_style(method):
            indicator = Condition(
                left_operand=placeholders.workflow_output(ERROR_MESSAGE),
                operator="mregex",
                right_operand=condition,
            )
            title = "Ignore If Exists"
        else:
            expected = int(condition.strip()) if condition.strip().isdigit() else condition
            indicator = Condition(
                left_operand=placeholders.workflow_output(STATUS_CODE),
                operator="eq",
                right_operand=expected,
            )
            title = "Ignore If Not Exists"

        ignore_flag = placeholders.workflow_input(IGNORE_FLAG)
        tolerated = _block(
            "IgnoreBranch",
            title,
            Condition(
                left_operand=Condition(left_operand=ignore_flag, operator="eq", right_operand=True),
                operator="and",
                right_operand=indicator,
            ),
            [_completed("IgnoredSuccess", True, placeholders.workflow_output(STATUS_MESSAGE))],
        )
        failed = _block(
            "NotIgnoredBranch",
            "Failed",
            Condition(
                left_operand=Condition(left_operand=ignore_flag, operator="eq", right_operand=False),
                operator="or",
                right_operand=negate(indicator),
            ),
            [_completed("IgnoredFailure", False, placeholders.workflow_output(ERROR_MESSAGE))],
        )
        return _if_else("SkipErrors", "Skip Errors?", [tolerated, failed])
