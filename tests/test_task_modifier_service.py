"""Tests for validated modifier writes."""

import pytest

from dobag.errors import (
    DoBagError,
    InvalidModifierValueError,
    ModifierAlreadyAppliedError,
    ModifierNotFoundError,
    UnsupportedModifierKindError,
)
from dobag.engine.task_modifiers import ModifierInput


class TestResolveModifier:
    """Test catalog lookups by id and by kind."""

    def test_by_id(self, modifier_service, modifier_repository):
        duration = modifier_repository.get_by_kind("duration")
        assert modifier_service.resolve_modifier(modifier_id=duration.id).kind == "duration"

    def test_by_kind(self, modifier_service):
        assert modifier_service.resolve_modifier(modifier_kind="priority").name == "Priority"

    def test_unknown_id(self, modifier_service):
        with pytest.raises(ModifierNotFoundError):
            modifier_service.resolve_modifier(modifier_id="nonexistent-id")

    def test_unknown_kind(self, modifier_service):
        with pytest.raises(ModifierNotFoundError):
            modifier_service.resolve_modifier(modifier_kind="location")

    def test_neither_given(self, modifier_service):
        with pytest.raises(DoBagError):
            modifier_service.resolve_modifier()


class TestPrepare:
    """Test checking the values of a task before it is written."""

    def test_valid_inputs(self, modifier_service, modifier_repository):
        duration = modifier_repository.get_by_kind("duration")

        prepared = modifier_service.prepare([
            ModifierInput(modifier_id=duration.id, value={"value": "2h"}),
            ModifierInput(modifier_kind="priority", value={"value": "low"}),
        ])

        assert [(modifier.kind, value) for modifier, value in prepared] == [
            ("duration", {"value": "2h"}),
            ("priority", {"value": "low"}),
        ]

    def test_no_inputs(self, modifier_service):
        assert modifier_service.prepare([]) == []

    def test_same_modifier_twice(self, modifier_service, modifier_repository):
        priority = modifier_repository.get_by_kind("priority")

        with pytest.raises(ModifierAlreadyAppliedError):
            modifier_service.prepare([
                ModifierInput(modifier_kind="priority", value={"value": "low"}),
                ModifierInput(modifier_id=priority.id, value={"value": "high"}),
            ])

    def test_invalid_value(self, modifier_service):
        with pytest.raises(InvalidModifierValueError):
            modifier_service.prepare([
                ModifierInput(modifier_kind="priority", value={"value": "low"}),
                ModifierInput(modifier_kind="duration", value={"value": "soon"}),
            ])


class TestAttach:
    """Test TaskModifierService.attach."""

    def test_attach_by_kind(self, modifier_service, make_task):
        task = make_task()
        task_modifier = modifier_service.attach(task, ModifierInput(modifier_kind="duration", value={"value": "45m"}))

        assert task_modifier.task_id == task.id
        assert task_modifier.value == {"value": "45m"}
        assert task_modifier.modifier_kind == "duration"
        assert task_modifier.modifier_name == "Duration"

    def test_invalid_value_is_not_persisted(self, modifier_service, make_task, task_modifier_repository):
        task = make_task()
        with pytest.raises(InvalidModifierValueError) as exc_info:
            modifier_service.attach(task, ModifierInput(modifier_kind="duration", value={"value": "abc"}))

        assert exc_info.value.expected_format == {"value": "30m"}
        assert task_modifier_repository.get_for_task(task.id) == []

    def test_attach_twice(self, modifier_service, make_task):
        task = make_task()
        modifier_service.attach(task, ModifierInput(modifier_kind="priority", value={"value": "low"}))

        with pytest.raises(ModifierAlreadyAppliedError):
            modifier_service.attach(task, ModifierInput(modifier_kind="priority", value={"value": "high"}))

    def test_kind_without_behavior_is_rejected(self, modifier_service, modifier_repository, make_task):
        modifier_repository.create(name="Location", kind="location")
        task = make_task()

        with pytest.raises(UnsupportedModifierKindError):
            modifier_service.attach(task, ModifierInput(modifier_kind="location", value={"value": "home"}))


class TestUpdateAndDetach:
    """Test TaskModifierService.update and detach."""

    def test_update_value(self, modifier_service, make_task):
        task = make_task()
        attached = modifier_service.attach(task, ModifierInput(modifier_kind="priority", value={"value": "low"}))

        updated = modifier_service.update(task, attached.modifier_id, {"value": "high"})

        assert updated.id == attached.id
        assert updated.value == {"value": "high"}

    def test_update_validates(self, modifier_service, make_task):
        task = make_task()
        attached = modifier_service.attach(task, ModifierInput(modifier_kind="priority", value={"value": "low"}))

        with pytest.raises(InvalidModifierValueError):
            modifier_service.update(task, attached.modifier_id, {"value": "urgent"})

    def test_update_not_attached(self, modifier_service, modifier_repository, make_task):
        task = make_task()
        priority = modifier_repository.get_by_kind("priority")

        with pytest.raises(ModifierNotFoundError):
            modifier_service.update(task, priority.id, {"value": "high"})

    def test_detach(self, modifier_service, make_task, task_modifier_repository):
        task = make_task()
        attached = modifier_service.attach(task, ModifierInput(modifier_kind="priority", value={"value": "low"}))

        modifier_service.detach(task, attached.modifier_id)

        assert task_modifier_repository.get_for_task(task.id) == []

    def test_detach_not_attached(self, modifier_service, make_task):
        with pytest.raises(ModifierNotFoundError):
            modifier_service.detach(make_task(), "nonexistent-id")


class TestApplyBatch:
    """Test TaskModifierService.apply_batch."""

    def test_mixed_batch(self, modifier_service, make_task, task_modifier_repository):
        task = make_task()
        batch = modifier_service.apply_batch(task, [
            ModifierInput(modifier_kind="duration", value={"value": "1h"}),
            ModifierInput(modifier_kind="priority", value={"value": "urgent"}),
            ModifierInput(modifier_kind="divisibility", value={"value": True, "maxSegments": 2}),
        ])

        assert len(batch.results) == 2
        assert batch.errors == [{
            "kind": "priority",
            "error": "Invalid value for this modifier type",
            "expected_format": {"value": "medium"},
        }]
        assert {m.modifier_kind for m in task_modifier_repository.get_for_task(task.id)} == {"duration", "divisibility"}

    def test_batch_updates_existing_values(self, modifier_service, make_task, task_modifier_repository):
        task = make_task()
        attached = modifier_service.attach(task, ModifierInput(modifier_kind="duration", value={"value": "1h"}))

        batch = modifier_service.apply_batch(task, [ModifierInput(modifier_kind="duration", value={"value": "2h"})])

        assert batch.errors == []
        assert batch.results[0].id == attached.id
        assert task_modifier_repository.get(task.id, attached.modifier_id).value == {"value": "2h"}

    def test_batch_validates_updates(self, modifier_service, make_task, task_modifier_repository):
        task = make_task()
        attached = modifier_service.attach(task, ModifierInput(modifier_kind="duration", value={"value": "1h"}))

        batch = modifier_service.apply_batch(task, [ModifierInput(modifier_kind="duration", value={"value": "soon"})])

        assert batch.results == []
        assert len(batch.errors) == 1
        assert task_modifier_repository.get(task.id, attached.modifier_id).value == {"value": "1h"}

    def test_unresolvable_input_is_reported(self, modifier_service, make_task):
        batch = modifier_service.apply_batch(make_task(), [ModifierInput(modifier_kind="location", value={})])

        assert batch.results == []
        assert batch.errors[0]["input"]["modifier_kind"] == "location"
        assert batch.errors[0]["error"] == "Modifier type not found"
