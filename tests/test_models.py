from atomic_generator.generator.models import Action, Block, BlockProperties, Condition
from atomic_generator.parser.base import Operation, Parameter, PathItem, Schema


class TestSchema:
    def test_ref_alias(self):
        s = Schema.model_validate({"$ref": "#/components/schemas/Device"})
        assert s.ref == "#/components/schemas/Device"
        assert s.type == ""
        assert s.properties == {}

    def test_nested_properties_and_items(self):
        s = Schema.model_validate({
            "type": "object",
            "required": ["tags"],
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
            },
        })
        assert s.properties["tags"].items.type == "string"
        assert s.required == ["tags"]

    def test_openapi_31_type_list(self):
        s = Schema.model_validate({"type": ["null", "integer"]})
        assert s.type == "integer"

    def test_null_description_and_boolean_required(self):
        s = Schema.model_validate({"type": "string", "description": None, "required": True})
        assert s.description == ""
        assert s.required == []

    def test_is_empty(self):
        assert Schema().is_empty() is True
        assert Schema(type="object").is_empty() is False


class TestParameter:
    def test_aliases(self):
        p = Parameter.model_validate({"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}})
        assert p.location == "path"
        assert p.value_schema.type == "integer"
        assert p.description == ""

    def test_defaults(self):
        p = Parameter(name="q")
        assert p.location == "query"
        assert p.required is False


class TestPathItem:
    def test_operations_keyed_by_upper_method(self):
        item = PathItem(get=Operation(operation_id="a"), delete=Operation(operation_id="b"))
        ops = item.operations()
        assert list(ops) == ["GET", "DELETE"]
        assert ops["DELETE"].operation_id == "b"


class TestOutputModels:
    def test_nested_condition_serialization(self):
        condition = Condition(
            left_operand=Condition(left_operand="$flag$", operator="eq", right_operand=True),
            operator="and",
            right_operand=Condition(left_operand="$code$", operator="eq", right_operand=404),
        )
        data = condition.model_dump()
        assert data["left_operand"] == {"left_operand": "$flag$", "operator": "eq", "right_operand": True}
        assert data["right_operand"]["right_operand"] == 404

    def test_action_with_blocks_dump(self):
        block = Block(
            unique_name="b",
            title="Failed",
            properties=BlockProperties(
                condition=Condition(left_operand="x", operator="ne", right_operand=200),
                display_name="Failed",
            ),
        )
        action = Action(unique_name="a", name="Condition Block", title="t", type="logic.if_else", blocks=[block])
        data = action.model_dump()
        assert data["base_type"] == "activity"
        assert data["object_type"] == "definition_activity"
        assert data["blocks"][0]["type"] == "logic.condition_block"
        assert data["blocks"][0]["actions"] == []
        assert data["blocks"][0]["properties"]["skip_execution"] is False
