import pytest

from focusflow.models.task import TaskStatus
from focusflow.store import LocalStore
from focusflow.tasks import TaskList


@pytest.fixture
def tasks(store: LocalStore) -> TaskList:
    return TaskList(store)


def test_create_newest_first(tasks: TaskList):
    first = tasks.create("Read paper")
    second = tasks.create("  Write notes  ", category="Work", duration=50)
    assert [t.id for t in tasks.list()] == [second.id, first.id]
    assert second.title == "Write notes"
    assert second.duration == 50


def test_blank_title_rejected(tasks: TaskList):
    with pytest.raises(ValueError):
        tasks.create("   ")


def test_filter_by_category(tasks: TaskList):
    tasks.create("Read", category="Study")
    tasks.create("Ship", category="Work")
    assert [t.title for t in tasks.list("Work")] == ["Ship"]
    assert len(tasks.list("all")) == 2


def test_toggle_and_completed_count(tasks: TaskList):
    task = tasks.create("Read")
    done = tasks.toggle(task.id)
    assert done.status == TaskStatus.COMPLETED
    assert done.updated_at is not None
    assert tasks.completed_count() == 1
    assert tasks.toggle(task.id).status == TaskStatus.ACTIVE
    with pytest.raises(KeyError):
        tasks.toggle("missing")


def test_delete(tasks: TaskList):
    task = tasks.create("Read")
    assert tasks.delete(task.id) is True
    assert tasks.delete(task.id) is False
    assert tasks.get(task.id) is None


def test_seed_demo_only_once(tasks: TaskList, store: LocalStore):
    assert tasks.seed_demo() is True
    assert len(tasks.list()) == 4
    assert len(store.sessions()) == 3
    assert tasks.completed_count() == 1
    assert tasks.seed_demo() is False
    assert len(store.sessions()) == 3
