"""
Unit tests for the conditions DSL module.

These tests verify:
1. Attr builder and composition produce DynCondition instances
2. Seek predicates have the lexicographic shape for every direction mix
3. The always-false predicate matches nothing
4. In-memory evaluation follows DynamoDB filter semantics
5. compile_condition binds values as placeholders
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from boto3.dynamodb.conditions import Attr as Boto3Attr
from boto3.dynamodb.conditions import ConditionBase as Boto3ConditionBase

from paginantic.conditions import (
    Attr,
    DynCondition,
    build_seek_condition,
    compile_condition,
    evaluate_condition,
    never,
)
from paginantic.serializer import DynamoSerializer


class TestAttrBuilder:
    """Test the Attr class for building conditions."""

    def test_comparison_operators_return_dyncondition(self):
        """Test every comparison operator wraps a boto3 condition."""
        attr = Attr("age")
        for condition in (attr == 1, attr != 1, attr < 1, attr <= 1, attr > 1, attr >= 1):
            assert isinstance(condition, DynCondition)
            assert isinstance(condition.raw, Boto3ConditionBase)

    def test_function_methods_return_dyncondition(self):
        """Test DynamoDB function methods return DynCondition."""
        attr = Attr("tags")
        conditions = [
            attr.exists(),
            attr.not_exists(),
            attr.begins_with("py"),
            attr.contains("python"),
            attr.between(1, 2),
            attr.is_in(["a", "b"]),
        ]
        assert all(isinstance(c, DynCondition) for c in conditions)

    def test_composition_returns_dyncondition(self):
        """Test &, | and ~ produce DynCondition."""
        condition = ((Attr("age") >= 18) | (Attr("role") == "admin")) & ~Attr("banned").exists()
        assert isinstance(condition, DynCondition)

    def test_mixed_boto3_composition(self):
        """Test raw boto3 conditions compose on either side."""
        boto3_cond = Boto3Attr("x").eq(1)
        assert isinstance((Attr("y") == 2) & boto3_cond, DynCondition)
        assert isinstance(boto3_cond | (Attr("y") == 2), DynCondition)


class TestSeekCondition:
    """Test the keyset seek predicate."""

    def test_single_ascending_key_forward(self):
        """Test forward seek on an ascending key selects strictly greater values."""
        condition = build_seek_condition([("id", True, 3)], forward=True)

        assert evaluate_condition(condition, {"id": 4})
        assert not evaluate_condition(condition, {"id": 3})
        assert not evaluate_condition(condition, {"id": 2})

    def test_single_descending_key_forward(self):
        """Test forward seek on a descending key selects strictly smaller values."""
        condition = build_seek_condition([("id", False, 3)], forward=True)

        assert evaluate_condition(condition, {"id": 2})
        assert not evaluate_condition(condition, {"id": 3})
        assert not evaluate_condition(condition, {"id": 4})

    def test_backward_flips_the_operator(self):
        """Test backward seek selects rows before the cursor."""
        condition = build_seek_condition([("id", True, 3)], forward=False)

        assert evaluate_condition(condition, {"id": 2})
        assert not evaluate_condition(condition, {"id": 4})

    def test_composite_key_mixed_directions(self):
        """Test (name asc, id desc) after cursor (b, 5)."""
        condition = build_seek_condition([("name", True, "b"), ("id", False, 5)], forward=True)

        # Later name group
        assert evaluate_condition(condition, {"name": "c", "id": 9})
        # Same name, smaller id comes after in id-descending order
        assert evaluate_condition(condition, {"name": "b", "id": 2})
        # The cursor row itself and everything before it
        assert not evaluate_condition(condition, {"name": "b", "id": 5})
        assert not evaluate_condition(condition, {"name": "b", "id": 7})
        assert not evaluate_condition(condition, {"name": "a", "id": 1})

    def test_composite_key_backward(self):
        """Test (name asc, id desc) before cursor (b, 5)."""
        condition = build_seek_condition([("name", True, "b"), ("id", False, 5)], forward=False)

        assert evaluate_condition(condition, {"name": "a", "id": 1})
        assert evaluate_condition(condition, {"name": "b", "id": 7})
        assert not evaluate_condition(condition, {"name": "b", "id": 5})
        assert not evaluate_condition(condition, {"name": "b", "id": 2})
        assert not evaluate_condition(condition, {"name": "c", "id": 9})

    def test_shape_is_disjunction_of_prefix_ties(self):
        """Test the top level is an OR with one clause per key."""
        condition = build_seek_condition(
            [("a", True, 1), ("b", True, 2), ("c", True, 3)], forward=True
        )
        expression = condition.raw.get_expression()
        assert expression["operator"] == "OR"

    def test_empty_keys_rejected(self):
        """Test at least one key is required."""
        with pytest.raises(ValueError):
            build_seek_condition([], forward=True)


class TestNever:
    """Test the always-false predicate."""

    def test_matches_nothing(self):
        """Test no record satisfies never(), present attribute or not."""
        condition = never("id")
        assert not evaluate_condition(condition, {"id": 1})
        assert not evaluate_condition(condition, {"other": 1})
        assert not evaluate_condition(condition, {})

    def test_compiles_for_dynamodb(self):
        """Test never() is expressible as a FilterExpression (no values needed)."""
        result = compile_condition(never("id"), DynamoSerializer())

        assert "attribute_exists" in result["ConditionExpression"]
        assert "attribute_not_exists" in result["ConditionExpression"]
        assert "ExpressionAttributeValues" not in result


class TestEvaluateCondition:
    """Test in-memory evaluation of condition trees."""

    def test_missing_attribute_comparisons_are_false(self):
        """Test comparisons against a missing attribute never match."""
        assert not evaluate_condition(Attr("age") > 1, {})
        assert not evaluate_condition(Attr("age") < 1, {})
        assert not evaluate_condition(Attr("age") == 1, {})

    def test_none_never_satisfies_ordering(self):
        """Test NULL values never satisfy an ordering comparison."""
        assert not evaluate_condition(Attr("age") > 1, {"age": None})
        assert not evaluate_condition(Attr("age") < 1, {"age": None})

    def test_incomparable_types_are_false(self):
        """Test comparing a string with a number is false rather than an error."""
        assert not evaluate_condition(Attr("age") > 1, {"age": "old"})

    def test_not_equal_requires_presence(self):
        """Test <> does not match a missing attribute (DynamoDB semantics)."""
        assert evaluate_condition(Attr("status") != "deleted", {"status": "active"})
        assert not evaluate_condition(Attr("status") != "deleted", {})

    def test_functions(self):
        """Test function operators against a record."""
        record = {"name": "python", "tags": ["a", "b"], "age": 30}

        assert evaluate_condition(Attr("name").begins_with("py"), record)
        assert evaluate_condition(Attr("tags").contains("a"), record)
        assert evaluate_condition(Attr("age").between(18, 65), record)
        assert evaluate_condition(Attr("age").is_in([30, 40]), record)
        assert evaluate_condition(Attr("age").exists(), record)
        assert evaluate_condition(Attr("email").not_exists(), record)

    def test_not_operator(self):
        """Test ~ negates the wrapped condition."""
        assert evaluate_condition(~(Attr("age") > 40), {"age": 30})

    def test_nested_paths_on_objects(self):
        """Test dotted attribute paths resolve through nested mappings."""
        record = {"author": {"name": "ada"}}
        assert evaluate_condition(Attr("author.name") == "ada", record)

    def test_raw_boto3_condition(self):
        """Test raw boto3 conditions are evaluated too."""
        assert evaluate_condition(Boto3Attr("age").gte(18), {"age": 18})

    def test_datetime_compares_with_iso_text(self):
        """Test a datetime attribute compares with the ISO text a JSON cursor decodes to."""
        record = {"created_at": datetime(2020, 9, 13, 12, 26, 40, tzinfo=timezone.utc)}

        assert evaluate_condition(Attr("created_at") > "2020-09-13T11:00:00Z", record)
        assert evaluate_condition(Attr("created_at") == "2020-09-13T12:26:40Z", record)
        assert not evaluate_condition(Attr("created_at") < "2020-09-13T12:26:40Z", record)

    def test_float_and_decimal_compare_equal(self):
        assert evaluate_condition(Attr("score") == Decimal("1.5"), {"score": 1.5})
        assert evaluate_condition(Attr("score").is_in([1.5]), {"score": Decimal("1.5")})


class TestCompilation:
    """Test compilation of conditions to DynamoDB parameters."""

    def setup_method(self):
        self.serializer = DynamoSerializer()

    def test_compile_simple_condition(self):
        """Test compiling a simple equality condition."""
        result = compile_condition(Attr("username") == "mario", self.serializer)

        # Placeholder names are boto3's (#n0, :v0), check the bound content
        assert "username" in result["ExpressionAttributeNames"].values()
        assert {"S": "mario"} in result["ExpressionAttributeValues"].values()

    def test_seek_values_are_placeholders(self):
        """Test cursor values never reach the expression text."""
        condition = build_seek_condition(
            [("name", True, "O'Brien; DROP"), ("id", False, 5)], forward=True
        )
        result = compile_condition(condition, self.serializer)

        assert "O'Brien" not in result["ConditionExpression"]
        values = result["ExpressionAttributeValues"].values()
        assert {"S": "O'Brien; DROP"} in values
        assert {"N": "5"} in values

    def test_float_values_are_serialized_as_decimal(self):
        """Test decoded JSON floats are accepted by the boto3 serializer."""
        result = compile_condition(Attr("score") > 9.5, self.serializer)
        assert {"N": "9.5"} in result["ExpressionAttributeValues"].values()
