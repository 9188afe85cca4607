import json
from pathlib import Path

import pytest

from atomic_generator.errors import ConfigError, GenerationError, MethodNotAvailableError, PathNotFoundError
from atomic_generator.generator.batch import (
    BatchConfig,
    BatchOrchestrator,
    WorkflowEntry,
    WorkflowOptions,
    entry_options,
    load_batch_config,
    load_query_param_config,
    write_outputs,
)
from atomic_generator.generator.options import GenerationOptions

FIXTURES = Path(__file__).parent / "fixtures"


def _inputs(content):
    variables = json.loads(content)["workflow"]["variables"]
    return [v["properties"]["name"] for v in variables if v["properties"]["scope"] == "input"]


class TestLoadBatchConfig:
    def test_yaml(self):
        config = load_batch_config(FIXTURES / "batch.yaml")
        assert config.defaults.query_params == ["name"]
        assert len(config.workflows) == 2
        assert config.workflows[0].options.support_idempotency is True
        assert config.workflows[1].options.idempotency_condition == "404"

    def test_bare_list(self, tmp_path):
        f = tmp_path / "config.json"
        f.write_text(json.dumps([{"endpoint": "dcim/devices", "methods": ["GET"]}]))
        config = load_batch_config(f)
        assert config.workflows[0].endpoint == "dcim/devices"
        assert config.defaults.query_params == []

    def test_empty_file(self, tmp_path):
        f = tmp_path / "config.yaml"
        f.write_text("")
        with pytest.raises(ConfigError, match="empty"):
            load_batch_config(f)

    def test_no_workflows(self, tmp_path):
        f = tmp_path / "config.yaml"
        f.write_text("defaults:\n  query_params: [name]\n")
        with pytest.raises(ConfigError, match="no workflows"):
            load_batch_config(f)

    def test_invalid_shape(self, tmp_path):
        f = tmp_path / "config.yaml"
        f.write_text("workflows:\n  - methods: GET-and-POST\n")
        with pytest.raises(ConfigError, match="invalid"):
            load_batch_config(f)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_batch_config(tmp_path / "nope.yaml")


class TestLoadQueryParamConfig:
    def test_cleans_lists(self, tmp_path):
        f = tmp_path / "qp.yaml"
        f.write_text("dcim_devices_list: [status, ' name ', status, '']\nempty_list: []\n")
        assert load_query_param_config(f) == {"dcim_devices_list": ["name", "status"]}

    def test_rejects_non_mapping(self, tmp_path):
        f = tmp_path / "qp.yaml"
        f.write_text("dcim_devices_list: status\n")
        with pytest.raises(ConfigError):
            load_query_param_config(f)

    def test_empty(self, tmp_path):
        f = tmp_path / "qp.json"
        f.write_text("")
        assert load_query_param_config(f) == {}


class TestEntryOptions:
    def test_get_query_allow_list(self):
        entry = WorkflowEntry(endpoint="x", query_params=["status", "name"])
        opts = entry_options(GenerationOptions(), entry, "GET", "op", ["name", "q"])
        assert opts.query_params == {"op": ["name", "q", "status"]}

    def test_post_body_allow_list(self):
        entry = WorkflowEntry(endpoint="x", body_params=["site", " name "])
        opts = entry_options(GenerationOptions(), entry, "POST", "op", ["q"])
        assert opts.body_params == {"op": ["name", "site"]}
        assert opts.query_params == {}

    def test_overrides_only_when_set(self):
        base = GenerationOptions(support_idempotency=True, idempotency_condition="exists", category_id="c")
        entry = WorkflowEntry(endpoint="x", options=WorkflowOptions(category_name="Devices", platform=" "))
        opts = entry_options(base, entry, "DELETE", "op", ["q"])
        assert opts.support_idempotency is True
        assert opts.idempotency_condition == "exists"
        assert opts.category_id == "c"
        assert opts.category_name == "Devices"
        assert opts.platform is None

    def test_base_not_modified(self):
        base = GenerationOptions(query_params={"other": ["a"]})
        entry = WorkflowEntry(endpoint="x", options=WorkflowOptions(support_idempotency=True))
        opts = entry_options(base, entry, "GET", "op", ["q"])
        assert set(opts.query_params) == {"other", "op"}
        assert base.query_params == {"other": ["a"]}
        assert base.support_idempotency is False


class TestBatchOrchestrator:
    def test_generates_each_method(self, netbox_spec, make_ids):
        config = load_batch_config(FIXTURES / "batch.yaml")
        results = list(BatchOrchestrator(netbox_spec, GenerationOptions(connector="netbox"), make_ids()).run(config))
        assert [(r.operation_id, r.method, r.path) for r in results] == [
            ("dcim_devices_list", "GET", "/api/dcim/devices/"),
            ("dcim_devices_create", "POST", "/api/dcim/devices/"),
            ("dcim_devices_destroy", "DELETE", "/api/dcim/devices/{id}/"),
        ]

        list_inputs = _inputs(results[0].content)
        assert list_inputs == ["Query - Q", "Query - Name", "Query - Status", "Input - Ignore If Does Not Exists"]
        assert _inputs(results[1].content) == [
            "Input - Ignore If Exists", "Input - Name", "Input - Role", "Input - Site",
        ]

        created = json.loads(results[1].content)
        assert created["workflow"]["categories"] == list(created["categories"])
        assert created["categories"][created["workflow"]["categories"][0]]["name"] == "Devices"

    def test_entries_do_not_leak(self, netbox_spec):
        config = BatchConfig(workflows=[
            WorkflowEntry(endpoint="dcim/devices", methods=["POST"], body_params=["name"],
                          options=WorkflowOptions(support_idempotency=True, idempotency_condition="exists")),
            WorkflowEntry(endpoint="dcim/devices", methods=["POST"]),
        ])
        base = GenerationOptions(connector="netbox")
        first, second = BatchOrchestrator(netbox_spec, base).run(config)
        assert _inputs(first.content) == ["Input - Ignore If Exists", "Input - Name"]
        assert "Input - Ignore If Exists" not in _inputs(second.content)
        assert "Input - Custom Fields" in _inputs(second.content)
        assert base.body_params == {}

    def test_all_methods_when_none_given(self, netbox_spec):
        config = BatchConfig(workflows=[WorkflowEntry(endpoint="dcim/devices/{id}")])
        results = BatchOrchestrator(netbox_spec, GenerationOptions(connector="netbox")).run(config)
        assert [r.method for r in results] == ["DELETE", "GET", "PATCH"]

    def test_missing_endpoint(self, netbox_spec):
        config = BatchConfig(workflows=[WorkflowEntry(methods=["GET"])])
        with pytest.raises(ConfigError, match="missing endpoint"):
            list(BatchOrchestrator(netbox_spec).run(config))

    def test_unknown_path(self, netbox_spec):
        config = BatchConfig(workflows=[WorkflowEntry(endpoint="nothing/here")])
        with pytest.raises(PathNotFoundError):
            list(BatchOrchestrator(netbox_spec).run(config))

    def test_path_without_operations(self, netbox_spec):
        config = BatchConfig(workflows=[WorkflowEntry(endpoint="dcim/sites")])
        with pytest.raises(GenerationError, match="no operations"):
            list(BatchOrchestrator(netbox_spec).run(config))

    def test_blank_methods(self, netbox_spec):
        config = BatchConfig(workflows=[WorkflowEntry(endpoint="dcim/devices", methods=[" "])])
        with pytest.raises(ConfigError, match="no valid methods"):
            list(BatchOrchestrator(netbox_spec).run(config))

    def test_method_not_available(self, netbox_spec):
        config = BatchConfig(workflows=[WorkflowEntry(endpoint="dcim/devices", methods=["PUT"])])
        with pytest.raises(MethodNotAvailableError, match="PUT"):
            list(BatchOrchestrator(netbox_spec).run(config))


class TestWriteOutputs:
    def test_writes_one_file_per_operation(self, netbox_spec, tmp_path, make_ids):
        config = BatchConfig(workflows=[WorkflowEntry(endpoint="dcim/devices/{id}", methods=["GET"])])
        results = list(BatchOrchestrator(netbox_spec, GenerationOptions(connector="netbox"), make_ids()).run(config))
        written = write_outputs(results, tmp_path / "out")
        assert written == [tmp_path / "out" / "dcim_devices_retrieve.json"]
        text = written[0].read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert json.loads(text)["workflow"]["name"] == "Netbox - Get Device by ID"
