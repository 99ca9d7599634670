"""Persisted form of a PublishPlan.

Planning and publishing may run in different processes. The plan is stored
in the job state as JSON strings under fixed keys, so any string-valued
state store can carry it.
"""

import json
from collections.abc import Mapping

from pydantic import ValidationError

from orcbridge._constants import (
    STATE_CLEANUP_DIRECTORIES,
    STATE_CLEANUP_QUERIES,
    STATE_MOVE_AFTER,
    STATE_PUBLISH_DIRECTORIES,
    STATE_PUBLISH_QUERIES,
)
from orcbridge._exceptions import OrcConfigError, OrcPublishError
from orcbridge._types import PublishPlan


def serialize_publish_plan(plan: PublishPlan) -> dict[str, str]:
    """Serialize a plan into job state entries. Directory order is preserved."""
    return {
        STATE_PUBLISH_QUERIES: json.dumps(list(plan.publish_statements)),
        STATE_PUBLISH_DIRECTORIES: json.dumps(plan.publish_directories),
        STATE_CLEANUP_QUERIES: json.dumps(list(plan.cleanup_statements)),
        STATE_CLEANUP_DIRECTORIES: json.dumps(list(plan.cleanup_directories)),
        STATE_MOVE_AFTER: json.dumps(plan.move_after),
    }


def deserialize_publish_plan(state: Mapping[str, str]) -> PublishPlan:
    """Rebuild a plan from job state entries.

    Missing collections are read as empty. A state without move_after
    runs every publish statement before the directory moves.

    Raises:
        OrcPublishError: If an entry is not valid JSON or does not form a valid plan
    """
    try:
        publish_statements = json.loads(state.get(STATE_PUBLISH_QUERIES, "[]"))
        move_after = state.get(STATE_MOVE_AFTER)
        return PublishPlan(
            publish_statements=tuple(publish_statements),
            publish_directories=json.loads(state.get(STATE_PUBLISH_DIRECTORIES, "{}")),
            cleanup_statements=tuple(json.loads(state.get(STATE_CLEANUP_QUERIES, "[]"))),
            cleanup_directories=tuple(json.loads(state.get(STATE_CLEANUP_DIRECTORIES, "[]"))),
            move_after=len(publish_statements) if move_after is None else json.loads(move_after),
        )
    except (json.JSONDecodeError, ValidationError, OrcConfigError, TypeError) as e:
        raise OrcPublishError(f"Invalid persisted publish plan: {e}") from e
