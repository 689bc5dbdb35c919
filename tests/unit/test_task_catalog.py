"""Tests for the fixed task catalog."""

import pytest
from pydantic import ValidationError

from src.services import task_catalog


@pytest.mark.unit
def test_catalog_has_ten_tasks_with_unique_ids():
    tasks = task_catalog.get_available_tasks()

    assert len(tasks) == 10
    assert len({task.id for task in tasks}) == 10


@pytest.mark.unit
def test_catalog_order_is_stable():
    tasks = task_catalog.get_available_tasks()

    assert tasks[0].id == "cooking-basic-meal"
    assert tasks[1].id == "public-speaking"
    assert tasks[-1].id == "leadership-task"


@pytest.mark.unit
def test_get_first_task():
    assert task_catalog.get_first_task().id == "cooking-basic-meal"


@pytest.mark.unit
def test_get_task_lookup():
    assert task_catalog.get_task("basic-coding").title == "Write Basic Code"
    assert task_catalog.get_task("missing-task") is None


@pytest.mark.unit
def test_tasks_are_immutable():
    task = task_catalog.get_first_task()

    with pytest.raises(ValidationError):
        task.title = "Changed"


@pytest.mark.unit
def test_returned_list_is_a_copy():
    tasks = task_catalog.get_available_tasks()
    tasks.clear()

    assert len(task_catalog.get_available_tasks()) == 10


@pytest.mark.unit
def test_task_serializes_with_camel_case():
    payload = task_catalog.get_first_task().model_dump(by_alias=True)

    assert "estimatedTime" in payload
    assert payload["difficulty"] == "beginner"
