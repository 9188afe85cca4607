"""Connector variants: how each target platform shapes its API call action.

The set is closed; pick one with `get_connector(name)`.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict

from atomic_generator.errors import UnknownConnectorError
from atomic_generator.parser.base import Operation, Schema

CALL_TIMEOUT = 180


class Connector(BaseModel, ABC):
    """Static description of one connector's call action and response shape."""

    model_config = ConfigDict(frozen=True)

    name: str
    atomic_group: str
    target_type: str
    action_type: str
    response_body_field: str
    status_message_field: str = ""
    api_base_path: str = ""
    platform_display_name: str
    # False means query strings and bodies are assembled by a script action first
    native_templating: bool = True
    default_query_filters: dict[str, list[str]] = {}
    pagination_outputs: dict[str, Schema] = {}

    @abstractmethod
    def call_properties(
        self, method: str, endpoint: str, body: str, operation: Operation, display_name: str
    ) -> dict[str, Any]:
        """Properties of the API call action for this connector."""


class MerakiConnector(Connector):
    def call_properties(self, method, endpoint, body, operation, display_name):
        return {
            "action_timeout": CALL_TIMEOUT,
            "api_body": body,
            "api_method": method,
            "api_url": endpoint,
            "continue_on_failure": False,
            "description": operation.description,
            "display_name": display_name,
            "runtime_user": {"target_default": True},
            "skip_execution": False,
            "target": {"use_workflow_target": True},
        }


class NetboxConnector(Connector):
    def call_properties(self, method, endpoint, body, operation, display_name):
        props = {
            "action_timeout": CALL_TIMEOUT,
            "continue_on_failure": True,
            "display_name": display_name,
            "_method": method,
            "_endpoint": endpoint,
            "runtime_user": {"target_default": True},
            "skip_execution": False,
            "target": {"use_workflow_target": True},
        }
        if body.strip():
            props["_body"] = body
        return props


CONNECTORS: dict[str, Connector] = {
    "meraki": MerakiConnector(
        name="meraki",
        atomic_group="Cisco Meraki",
        target_type="meraki.endpoint",
        action_type="meraki.api_request",
        response_body_field="response_body",
        status_message_field="status_text",
        api_base_path="/api/v1",
        platform_display_name="Cisco Meraki",
    ),
    "netbox": NetboxConnector(
        name="netbox",
        atomic_group="NetBox",
        target_type="netbox.endpoint",
        action_type="netbox.invoke_api",
        response_body_field="raw_body",
        platform_display_name="Netbox",
        native_templating=False,
        default_query_filters={
            "dcim_devices_list": [
                "q", "name", "id", "site_id", "device_type_id", "role_id", "status", "tag", "has_primary_ip",
            ],
        },
        pagination_outputs={
            "count": Schema(type="integer", description="Total number of records available."),
            "next": Schema(type="string", description="URL for the next page of results."),
            "previous": Schema(type="string", description="URL for the previous page of results."),
            "results": Schema(type="string", description="Paginated results array (JSON string)."),
        },
    ),
}


def get_connector(name: str) -> Connector:
    key = (name or "meraki").strip().lower() or "meraki"
    try:
        return CONNECTORS[key]
    except KeyError:
        raise UnknownConnectorError(name) from None
