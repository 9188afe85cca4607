import json
from pathlib import Path

from click.testing import CliRunner

from atomic_generator.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliGenerate:
    def test_generate_to_stdout(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", str(FIXTURES / "widgets.yaml"),
            "--operation-id", "getWidget",
        ])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["workflow"]["name"] == "Cisco Meraki - Get Widget by ID"

    def test_generate_to_file(self, tmp_path):
        output_file = tmp_path / "nested" / "workflow.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", str(FIXTURES / "netbox.yaml"),
            "--operation-id", "dcim_devices_create",
            "--connector", "netbox",
            "--support-idempotency",
            "--idempotency-condition", "already exists",
            "--platform", "NetBox",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert "Workflow saved to" in result.stderr
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["workflow"]["name"] == "NetBox - Create Device"
        names = [v["properties"]["name"] for v in data["workflow"]["variables"]]
        assert "Input - Ignore If Exists" in names

    def test_generate_with_query_params_and_acronyms(self, tmp_path):
        qp_file = tmp_path / "qp.yaml"
        qp_file.write_text("dcim_devices_list: [status]\n")
        acronyms_file = tmp_path / "acronyms.csv"
        acronyms_file.write_text("Q\n")

        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", str(FIXTURES / "netbox.yaml"),
            "--operation-id", "dcim_devices_list",
            "--connector", "netbox",
            "--query-params-config", str(qp_file),
            "--acronyms", str(acronyms_file),
        ])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        inputs = [v["properties"]["name"] for v in data["workflow"]["variables"] if v["properties"]["scope"] == "input"]
        assert inputs == ["Query - Q", "Query - Status"]

    def test_unknown_operation_fails(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", str(FIXTURES / "widgets.yaml"),
            "--operation-id", "nope",
        ])

        assert result.exit_code == 1
        assert "operationId nope not found" in result.output

    def test_operation_id_required(self):
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(FIXTURES / "widgets.yaml")])

        assert result.exit_code != 0
        assert "--operation-id" in result.output

    def test_invalid_schema_fails_cleanly(self, tmp_path):
        spec_file = tmp_path / "spec.yaml"
        spec_file.write_text(
            "paths:\n"
            "  /x:\n"
            "    get:\n"
            "      operationId: getX\n"
            "      responses:\n"
            "        '200':\n"
            "          content:\n"
            "            application/json:\n"
            "              schema:\n"
            "                type: object\n"
            "                properties:\n"
            "                  anything: true\n"
        )
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(spec_file), "--operation-id", "getX"])

        assert result.exit_code == 1
        assert "invalid OpenAPI document" in result.output


class TestCliBatch:
    def test_batch(self, tmp_path):
        output_dir = tmp_path / "out"
        runner = CliRunner()
        result = runner.invoke(main, [
            "batch", str(FIXTURES / "netbox.yaml"),
            "-c", str(FIXTURES / "batch.yaml"),
            "-o", str(output_dir),
            "--connector", "netbox",
        ])

        assert result.exit_code == 0
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "dcim_devices_create.json",
            "dcim_devices_destroy.json",
            "dcim_devices_list.json",
        ]
        assert "Generated 3 workflows" in result.output

    def test_batch_failure_writes_nothing(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("workflows:\n  - endpoint: dcim/devices\n    methods: [GET]\n  - endpoint: nothing\n")
        output_dir = tmp_path / "out"

        runner = CliRunner()
        result = runner.invoke(main, [
            "batch", str(FIXTURES / "netbox.yaml"),
            "-c", str(config),
            "-o", str(output_dir),
            "--connector", "netbox",
        ])

        assert result.exit_code == 1
        assert "path /api/nothing/ not found" in result.output
        assert not output_dir.exists()
