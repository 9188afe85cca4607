import pytest

from atomic_generator.errors import UnknownConnectorError
from atomic_generator.generator.connectors import (
    Connector,
    MerakiConnector,
    NetboxConnector,
    get_connector,
)
from atomic_generator.parser.base import Operation


class TestConnectorBase:
    def test_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            Connector(
                name="plain",
                atomic_group="Plain",
                target_type="plain.endpoint",
                action_type="plain.api_request",
                response_body_field="body",
                platform_display_name="Plain",
            )

    def test_variants_build_call_properties(self):
        op = Operation(operation_id="getWidget", method="GET", description="Fetch one.")
        meraki = get_connector("meraki").call_properties("GET", "/w", "", op, "Get Widget")
        netbox = get_connector("netbox").call_properties("GET", "/w", "", op, "Get Widget")
        assert meraki["api_url"] == "/w"
        assert meraki["description"] == "Fetch one."
        assert netbox["_endpoint"] == "/w"
        assert "_body" not in netbox


class TestGetConnector:
    def test_lookup_ignores_case_and_whitespace(self):
        assert isinstance(get_connector(" NetBox "), NetboxConnector)

    def test_empty_name_defaults_to_meraki(self):
        assert isinstance(get_connector(""), MerakiConnector)
        assert get_connector("").name == "meraki"

    def test_unknown_name(self):
        with pytest.raises(UnknownConnectorError, match="unsupported connector type x"):
            get_connector("x")
