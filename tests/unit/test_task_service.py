"""Unit tests for the task service."""

from datetime import date

import pytest
from pydantic import ValidationError

from tests.factories import make_task
from tests.unit.mocks import seed_task
from upkeep.core.db_client import RecordNotFoundError
from upkeep.core.errors import MissingRequiredFieldError
from upkeep.domain.task import PriorityTier, TaskCreate, TaskScope, TaskStatus
from upkeep.modules.tasks import service


@pytest.mark.unit
class TestCreateTask:
    """Tests for create_task."""

    async def test_create_manual_task(self, patched_db):
        """A manual task is stored with defaults."""
        task = await service.create_task(TaskCreate(property_id="prop-1", title="Replace furnace filter"))

        assert task.id
        assert task.status == TaskStatus.IDENTIFIED
        assert task.cascade_risk_score is None
        stored = patched_db.task(task.id)
        assert stored["title"] == "Replace furnace filter"
        assert stored["status"] == "Identified"

    def test_per_unit_payload_requires_unit_tag(self):
        """Per-unit payloads without a unit tag do not validate."""
        with pytest.raises(ValidationError, match="unit_tag is required for per-unit tasks"):
            TaskCreate(property_id="prop-1", title="Test GFCI", scope=TaskScope.PER_UNIT)

    def test_stored_per_unit_task_requires_unit_tag(self):
        """Stored per-unit records without a unit tag are rejected too."""
        with pytest.raises(ValidationError, match="unit_tag"):
            make_task(scope=TaskScope.PER_UNIT, unit_tag=None)

    async def test_per_unit_requires_unit_tag(self, patched_db):
        """Per-unit tasks must say which unit, even when validation was bypassed."""
        valid = TaskCreate(property_id="prop-1", title="Test GFCI", scope=TaskScope.PER_UNIT, unit_tag="Unit 1")
        untagged = valid.model_copy(update={"unit_tag": None})

        with pytest.raises(MissingRequiredFieldError) as exc_info:
            await service.create_task(untagged)

        assert exc_info.value.field == "unit_tag"
        assert await patched_db.list_records(collection="tasks") == []

    async def test_recurrence_is_normalized(self, patched_db):
        """Recurrence intervals are stored in normalized form."""
        task = await service.create_task(
            TaskCreate(property_id="prop-1", title="Flush water heater", recurrence_interval="annually")
        )

        assert task.recurrence_interval == "INTERVAL:M:12"

    async def test_invalid_recurrence(self, patched_db):
        """Bad recurrence text is rejected before anything is stored."""
        with pytest.raises(ValueError, match="Invalid recurrence format"):
            await service.create_task(TaskCreate(property_id="prop-1", title="X", recurrence_interval="sometimes"))

    async def test_advisor_fills_missing_risk(self, patched_db, stub_advisor):
        """Advisory output fills risk and cost fields the caller left empty."""
        task = await service.create_task(
            TaskCreate(property_id="prop-1", title="Clean gutters", system_type="Gutters", current_fix_cost=90),
            advisor=stub_advisor,
        )

        assert task.cascade_risk_score == 8
        assert task.delayed_fix_cost == 4500
        assert task.current_fix_cost == 90
        assert stub_advisor.calls == [{"title": "Clean gutters", "description": "", "system_type": "Gutters"}]

    async def test_advisor_failure_does_not_block(self, patched_db, failing_advisor):
        """Advisory failures leave risk unset and the task is still created."""
        task = await service.create_task(
            TaskCreate(property_id="prop-1", title="Clean gutters"),
            advisor=failing_advisor,
        )

        assert task.id
        assert task.cascade_risk_score is None
        assert task.risk_rationale is None


@pytest.mark.unit
class TestQueries:
    """Tests for get_tasks, delete_task and update_priority."""

    async def test_get_tasks_filters(self, patched_db):
        """Filters combine on property, status and unit."""
        seed_task(patched_db, property_id="p1", unit_tag="Unit 1")
        seed_task(patched_db, property_id="p1", unit_tag="Unit 2")
        seed_task(patched_db, property_id="p1", unit_tag="Unit 1", status="Deferred")
        seed_task(patched_db, property_id="p2", unit_tag="Unit 1")

        tasks = await service.get_tasks(property_id="p1", status=TaskStatus.IDENTIFIED, unit_tag="Unit 1")

        assert len(tasks) == 1
        assert tasks[0].property_id == "p1"
        assert tasks[0].unit_tag == "Unit 1"

    async def test_get_tasks_by_batch(self, patched_db):
        """Batch members can be listed together."""
        seed_task(patched_db, batch_id="b1")
        seed_task(patched_db, batch_id="b1")
        seed_task(patched_db, batch_id="b2")

        assert len(await service.get_tasks(batch_id="b1")) == 2

    async def test_delete_task(self, patched_db):
        """Deleted tasks are gone from the store."""
        task_id = seed_task(patched_db)

        await service.delete_task(task_id=task_id)

        with pytest.raises(RecordNotFoundError):
            await patched_db.get_record(collection="tasks", record_id=task_id)

    async def test_update_priority(self, patched_db):
        """Priority changes are persisted."""
        task_id = seed_task(patched_db, priority="Low")

        task = await service.update_priority(task_id=task_id, priority=PriorityTier.HIGH)

        assert task.priority == PriorityTier.HIGH


@pytest.mark.unit
class TestBulkOperations:
    """Tests for bulk operations without rollback."""

    async def test_bulk_transition_reports_per_task(self, patched_db):
        """Legal moves succeed while illegal ones fail independently."""
        ok_1 = seed_task(patched_db)
        ok_2 = seed_task(patched_db)
        done = seed_task(patched_db, status="Completed", completion_date="2025-01-01")

        result = await service.bulk_transition(
            task_ids=[ok_1, done, ok_2],
            target=TaskStatus.SCHEDULED,
            scheduled_date=date(2025, 8, 1),
        )

        assert result.succeeded == [ok_1, ok_2]
        assert list(result.failed) == [done]
        assert "Cannot transition" in result.failed[done]
        assert result.all_succeeded is False
        assert patched_db.task(ok_1)["status"] == "Scheduled"
        assert patched_db.task(done)["status"] == "Completed"

    async def test_bulk_update_priority(self, patched_db):
        """Store failures are isolated to their task."""
        first = seed_task(patched_db)
        second = seed_task(patched_db)
        patched_db.fail_on_record_ids = {second}

        result = await service.bulk_update_priority(task_ids=[first, second], priority=PriorityTier.HIGH)

        assert result.succeeded == [first]
        assert list(result.failed) == [second]
        assert patched_db.task(first)["priority"] == "High"

    async def test_bulk_delete_with_missing_ids(self, patched_db):
        """Missing IDs fail without stopping the rest."""
        task_id = seed_task(patched_db)

        result = await service.bulk_delete(task_ids=[task_id, "404", task_id])

        assert result.succeeded == [task_id]
        assert list(result.failed) == ["404"]
        assert await patched_db.list_records(collection="tasks") == []


@pytest.mark.unit
class TestNextOccurrence:
    """Tests for next_occurrence_for."""

    def test_counts_from_completion(self):
        """The next due day follows the completion day."""
        task = make_task(
            status=TaskStatus.COMPLETED,
            completion_date=date(2025, 3, 31),
            recurrence_interval="INTERVAL:M:3",
        )

        assert service.next_occurrence_for(task) == date(2025, 6, 30)

    def test_non_recurring(self):
        """Tasks without a recurrence have no next occurrence."""
        assert service.next_occurrence_for(make_task(completion_date=date(2025, 3, 31))) is None

    def test_no_reference_day(self):
        """Undated recurring tasks have no next occurrence."""
        assert service.next_occurrence_for(make_task(recurrence_interval="weekly")) is None
