"""Tests for orcbridge._types module."""

import pytest
from pydantic import ValidationError

from orcbridge._exceptions import OrcConfigError
from orcbridge._types import (
    ConversionConfig,
    ConversionEntity,
    DestinationMeta,
    OutputFormat,
    PublishPlan,
)


def _config(**kwargs):
    return ConversionConfig(
        destination_db="events",
        destination_table="pageviews_orc",
        staging_table_prefix="stg",
        destination_data_path="/data/orc",
        **kwargs,
    )


class TestOutputFormat:

    def test_config_prefixes(self):
        assert OutputFormat.FLATTENED.config_prefix == "flattenedOrc"
        assert OutputFormat.NESTED.config_prefix == "nestedOrc"

    def test_from_value(self):
        assert OutputFormat("nestedOrc") is OutputFormat.NESTED


class TestConversionEntity:

    def test_frozen(self, snapshot_entity):
        with pytest.raises(ValidationError):
            snapshot_entity.statements = ("SET a=1",)

    def test_complete_names(self, snapshot_entity, partitioned_entity):
        assert snapshot_entity.complete_name == "tracking@pageviews"
        assert partitioned_entity.complete_name == "tracking@pageviews@datepartition=2016-01-02"

    def test_is_partitioned(self, snapshot_entity, partitioned_entity):
        assert not snapshot_entity.is_partitioned
        assert partitioned_entity.is_partitioned

    def test_created_at_default(self, source_table):
        assert ConversionEntity(table=source_table).created_at > 0


class TestConversionConfig:

    def test_locations(self):
        config = _config()
        assert config.final_data_location == "/data/orc/final"
        assert config.staging_data_location("stg_1") == "/data/orc/stg_1"

    def test_cluster_by_requires_buckets(self):
        with pytest.raises(OrcConfigError):
            _config(cluster_by=("id",))

    @pytest.mark.parametrize("field", ["num_buckets", "row_limit"])
    def test_non_positive(self, field):
        with pytest.raises(OrcConfigError):
            _config(**{field: 0})


class TestDestinationMeta:

    def test_absent(self):
        assert not DestinationMeta().exists

    def test_present(self, existing_table):
        assert DestinationMeta(table=existing_table).exists


class TestPublishPlan:

    def test_defaults(self):
        plan = PublishPlan()
        assert plan.publish_statements == ()
        assert plan.move_after == 0

    def test_move_after_bounds(self):
        PublishPlan(publish_statements=("A",), move_after=1)
        with pytest.raises(OrcConfigError):
            PublishPlan(publish_statements=("A",), move_after=2)
        with pytest.raises(OrcConfigError):
            PublishPlan(move_after=-1)
