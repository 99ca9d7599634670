"""Tests for orcbridge.finalize module."""

import pytest

from orcbridge._exceptions import OrcPublishError
from orcbridge._types import PublishPlan
from orcbridge.finalize import cleanup, finalize, publish

DROP = "ALTER TABLE `events`.`pageviews_orc` DROP IF EXISTS PARTITION (`datepartition`='2016-01-02')"
ADD = "ALTER TABLE `events`.`pageviews_orc` ADD IF NOT EXISTS PARTITION (`datepartition`='2016-01-02') LOCATION 'x'"
DROP_REPLACED = "ALTER TABLE `events`.`pageviews_orc` DROP IF EXISTS PARTITION (`datepartition`='2016-01-02-00')"
DROP_STAGING = "DROP TABLE IF EXISTS `events`.`stg`"


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / "orc" / "stg"
    (path / "p").mkdir(parents=True)
    (path / "p" / "000000_0").write_bytes(b"ORC")
    return path


@pytest.fixture
def final_dir(tmp_path):
    return tmp_path / "orc" / "final" / "p"


@pytest.fixture
def plan(staging_dir, final_dir):
    return PublishPlan(
        publish_statements=(DROP, ADD, DROP_REPLACED),
        publish_directories={str(staging_dir / "p"): str(final_dir)},
        cleanup_statements=(DROP_STAGING,),
        cleanup_directories=(str(staging_dir),),
        move_after=1,
    )


class TestFinalize:

    def test_drop_move_add_order(self, plan, executor, filesystem, events, staging_dir, final_dir):
        finalize(plan, executor, filesystem)

        assert events[:4] == [
            ("sql", DROP),
            ("move", str(staging_dir / "p"), str(final_dir)),
            ("sql", ADD),
            ("sql", DROP_REPLACED),
        ]

    def test_cleanup_after_publish(self, plan, executor, filesystem, events, staging_dir):
        finalize(plan, executor, filesystem)

        assert events[4:] == [("sql", DROP_STAGING), ("delete", str(staging_dir))]
        assert not staging_dir.exists()

    def test_moves_data(self, plan, executor, filesystem, final_dir):
        finalize(plan, executor, filesystem)
        assert (final_dir / "000000_0").read_bytes() == b"ORC"

    def test_replaces_existing_final_dir(self, plan, executor, filesystem, final_dir):
        final_dir.mkdir(parents=True)
        (final_dir / "stale").write_text("old")

        finalize(plan, executor, filesystem)

        assert not (final_dir / "stale").exists()
        assert (final_dir / "000000_0").exists()

    def test_statement_failure_skips_cleanup(self, plan, make_executor, filesystem, events, staging_dir):
        executor = make_executor(fail_on="ADD IF NOT EXISTS")

        with pytest.raises(OrcPublishError, match="Failed: ALTER TABLE"):
            finalize(plan, executor, filesystem)

        assert ("sql", DROP_STAGING) not in events
        assert staging_dir.exists()

    def test_move_failure(self, plan, executor, make_filesystem, events):
        with pytest.raises(OrcPublishError, match="disk full"):
            finalize(plan, executor, make_filesystem(fail_on_move=True))

        assert events == [("sql", DROP)]

    def test_empty_plan(self, executor, filesystem, events):
        finalize(PublishPlan(), executor, filesystem)
        assert events == []


class TestPublishAndCleanup:

    def test_snapshot_moves_only(self, staging_dir, final_dir, executor, filesystem, events):
        plan = PublishPlan(publish_directories={str(staging_dir): str(final_dir)})
        publish(plan, executor, filesystem)
        assert events == [("move", str(staging_dir), str(final_dir))]

    def test_cleanup_only(self, plan, executor, filesystem, events, staging_dir):
        cleanup(plan, executor, filesystem)
        assert events == [("sql", DROP_STAGING), ("delete", str(staging_dir))]

    def test_cleanup_delete_failure(self, plan, executor, filesystem):
        class NoDelete(type(filesystem)):
            def delete(self, path):
                raise PermissionError("read-only")

        with pytest.raises(OrcPublishError, match="Failed to delete"):
            cleanup(plan, executor, NoDelete())
