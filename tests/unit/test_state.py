"""Tests for orcbridge._state module."""

import json

import pytest

from orcbridge._constants import (
    STATE_CLEANUP_DIRECTORIES,
    STATE_CLEANUP_QUERIES,
    STATE_MOVE_AFTER,
    STATE_PUBLISH_DIRECTORIES,
    STATE_PUBLISH_QUERIES,
)
from orcbridge._exceptions import OrcPublishError
from orcbridge._state import deserialize_publish_plan, serialize_publish_plan
from orcbridge._types import DestinationMeta, PublishPlan
from orcbridge.publish import build_publish_plan


class TestSerializePublishPlan:

    def test_keys(self):
        state = serialize_publish_plan(PublishPlan())
        assert set(state) == {
            STATE_PUBLISH_QUERIES,
            STATE_PUBLISH_DIRECTORIES,
            STATE_CLEANUP_QUERIES,
            STATE_CLEANUP_DIRECTORIES,
            STATE_MOVE_AFTER,
        }
        assert all(isinstance(v, str) for v in state.values())

    def test_values_are_json(self):
        plan = PublishPlan(publish_statements=("DROP x", "ADD y"), publish_directories={"/a": "/b"}, move_after=1)
        state = serialize_publish_plan(plan)

        assert json.loads(state[STATE_PUBLISH_QUERIES]) == ["DROP x", "ADD y"]
        assert json.loads(state[STATE_PUBLISH_DIRECTORIES]) == {"/a": "/b"}
        assert json.loads(state[STATE_MOVE_AFTER]) == 1


class TestDeserializePublishPlan:

    def test_planned_publish_survives(self, partitioned_entity, source_schema, config, staging_table):
        plan = build_publish_plan(partitioned_entity, source_schema, config, staging_table, DestinationMeta())
        restored = deserialize_publish_plan(serialize_publish_plan(plan))

        assert restored == plan
        assert list(restored.publish_directories) == list(plan.publish_directories)

    def test_directory_order_preserved(self):
        directories = {f"/stg/{i}": f"/final/{i}" for i in (3, 1, 2)}
        restored = deserialize_publish_plan(serialize_publish_plan(PublishPlan(publish_directories=directories)))
        assert list(restored.publish_directories) == ["/stg/3", "/stg/1", "/stg/2"]

    def test_missing_keys_are_empty(self):
        assert deserialize_publish_plan({}) == PublishPlan()

    def test_missing_move_after_runs_statements_first(self):
        plan = deserialize_publish_plan({STATE_PUBLISH_QUERIES: json.dumps(["A", "B"])})
        assert plan.move_after == 2

    def test_invalid_json(self):
        with pytest.raises(OrcPublishError, match="Invalid persisted publish plan"):
            deserialize_publish_plan({STATE_PUBLISH_QUERIES: "[not json"})

    def test_move_after_out_of_range(self):
        state = {STATE_PUBLISH_QUERIES: json.dumps(["A"]), STATE_MOVE_AFTER: "5"}
        with pytest.raises(OrcPublishError):
            deserialize_publish_plan(state)

    def test_wrong_shape(self):
        with pytest.raises(OrcPublishError):
            deserialize_publish_plan({STATE_PUBLISH_DIRECTORIES: json.dumps(["/a"])})

    def test_statements_not_a_list(self):
        with pytest.raises(OrcPublishError, match="Invalid persisted publish plan"):
            deserialize_publish_plan({STATE_PUBLISH_QUERIES: "5"})
