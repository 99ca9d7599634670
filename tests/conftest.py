"""Shared fixtures for orcbridge tests."""

import re
from pathlib import Path

import pyarrow as pa
import pytest

from orcbridge._constants import REPLACED_PARTITIONS_KEY
from orcbridge._types import (
    Column,
    ConversionConfig,
    ConversionEntity,
    OutputFormat,
    SourcePartition,
    SourceTable,
    TableMeta,
)
from orcbridge.catalog import InMemoryCatalog
from orcbridge.filesystem import LocalFileSystem

NOW_MS = 1451606400000
CREATED_AT = 1451692800000

_LOCATION = re.compile(r"LOCATION '([^']*)'")
_TABLE = re.compile(r"^(?:CREATE EXTERNAL TABLE IF NOT EXISTS|ALTER TABLE|INSERT OVERWRITE TABLE) `[^`]*`\.`([^`]*)`")


class FixedDigit:
    """Random source that always returns the same digit."""

    def __init__(self, digit: int = 7) -> None:
        self.digit = digit

    def randrange(self, stop: int) -> int:
        return self.digit


class RecordingExecutor:
    """Executor that records statements and fails on a matching one."""

    def __init__(self, events: list | None = None, fail_on: str | None = None) -> None:
        self.statements: list[str] = []
        self.events = events if events is not None else []
        self.fail_on = fail_on

    def execute(self, statement: str) -> None:
        if self.fail_on is not None and self.fail_on in statement:
            raise RuntimeError(f"rejected: {self.fail_on}")
        self.statements.append(statement)
        self.events.append(("sql", statement))


class LocalHiveExecutor(RecordingExecutor):
    """Executor that mimics table/partition directories and inserted data on local disk."""

    def __init__(self, events: list | None = None, fail_on: str | None = None) -> None:
        super().__init__(events, fail_on)
        self.locations: dict[str, str] = {}

    def execute(self, statement: str) -> None:
        super().execute(statement)
        table = _TABLE.search(statement)
        location = _LOCATION.search(statement)

        if table and location:
            Path(location.group(1)).mkdir(parents=True, exist_ok=True)
            self.locations[table.group(1)] = location.group(1)

        if table and statement.startswith("INSERT OVERWRITE"):
            data_dir = Path(self.locations[table.group(1)])
            data_dir.mkdir(parents=True, exist_ok=True)
            (data_dir / "000000_0").write_bytes(b"ORC")


class RecordingFileSystem(LocalFileSystem):
    """Local filesystem that records moves and deletes."""

    def __init__(self, events: list | None = None, fail_on_move: bool = False) -> None:
        self.events = events if events is not None else []
        self.fail_on_move = fail_on_move

    def move(self, src: str, dest: str) -> None:
        if self.fail_on_move:
            raise OSError("disk full")
        self.events.append(("move", src, dest))
        super().move(src, dest)

    def delete(self, path: str) -> None:
        self.events.append(("delete", path))
        super().delete(path)


@pytest.fixture
def source_schema():
    return pa.schema([("id", pa.int64()), ("url", pa.string())])


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / "avro" / "pageviews"
    path.mkdir(parents=True)
    path.chmod(0o750)
    return path


@pytest.fixture
def source_table(source_schema, source_dir):
    return SourceTable(db="tracking", name="pageviews", data_location=str(source_dir), record_schema=source_schema)


@pytest.fixture
def snapshot_entity(source_table):
    return ConversionEntity(table=source_table, created_at=CREATED_AT)


@pytest.fixture
def daily_partition():
    return SourcePartition(
        name="datepartition=2016-01-02",
        values=("2016-01-02",),
        data_location="/data/tracking/pageviews/daily/2016/01/02",
        column_types="string",
        parameters={REPLACED_PARTITIONS_KEY: "datepartition=2016-01-02-00,datepartition=2016-01-02-01"},
    )


@pytest.fixture
def partitioned_entity(source_table, daily_partition):
    return ConversionEntity(table=source_table, partition=daily_partition, created_at=CREATED_AT)


@pytest.fixture
def data_path(tmp_path):
    return str(tmp_path / "orc" / "pageviews")


@pytest.fixture
def config(data_path):
    return ConversionConfig(
        destination_db="events",
        destination_table="pageviews_orc",
        staging_table_prefix="pageviews_orc_stg",
        destination_data_path=data_path,
        evolution_enabled=True,
        source_data_path_identifiers=("hourly", "daily"),
    )


@pytest.fixture
def configs(config):
    return {OutputFormat.NESTED: config}


@pytest.fixture
def staging_table():
    return f"pageviews_orc_stg_{NOW_MS}7"


@pytest.fixture
def empty_catalog():
    return InMemoryCatalog()


@pytest.fixture
def existing_table():
    return TableMeta(
        db="events",
        name="pageviews_orc",
        columns=(Column(name="id", type="bigint"),),
        location="/data/pageviews_orc/final",
    )


@pytest.fixture
def existing_catalog(existing_table):
    return InMemoryCatalog(tables=[existing_table])


@pytest.fixture
def events():
    return []


@pytest.fixture
def executor(events):
    return RecordingExecutor(events)


@pytest.fixture
def filesystem(events):
    return RecordingFileSystem(events)


@pytest.fixture
def make_executor(events):
    def _make(fail_on=None, local=False):
        cls = LocalHiveExecutor if local else RecordingExecutor
        return cls(events, fail_on=fail_on)

    return _make


@pytest.fixture
def make_filesystem(events):
    def _make(fail_on_move=False):
        return RecordingFileSystem(events, fail_on_move=fail_on_move)

    return _make


@pytest.fixture
def now_ms():
    return NOW_MS


@pytest.fixture
def rng():
    return FixedDigit(7)
