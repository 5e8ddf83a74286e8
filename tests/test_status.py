import os

import pytest

from baur.inputresolver import InputResolver
from baur.inputs import Inputs, InputString
from baur.status import TaskRunNotFoundError, TaskStatusEvaluator
from baur.task import FileInputs, Task, TaskInputs, TaskStatus


class FakeStore:
    def __init__(self):
        self.runs = {}
        self.queries = []

    def add(self, app_name, task_name, digest, run):
        self.runs[(app_name, task_name, digest)] = run

    def latest_task_run_by_digest(self, app_name, task_name, total_input_digest):
        key = (app_name, task_name, total_input_digest)
        self.queries.append(key)
        try:
            return self.runs[key]
        except KeyError:
            raise TaskRunNotFoundError() from None


class BrokenStore:
    def latest_task_run_by_digest(self, app_name, task_name, total_input_digest):
        raise ConnectionError("database unreachable")


@pytest.fixture
def repo(tmp_path):
    with open(os.path.join(tmp_path, "in.txt"), "w") as fh:
        fh.write("content")
    return str(tmp_path)


def _task(repo):
    return Task(
        app_name="app",
        name="build",
        directory=repo,
        unresolved_inputs=TaskInputs(files=[FileInputs(paths=["in.txt"])]),
    )


def _file_inputs(repo, task):
    return InputResolver().resolve(repo, task)


def test_pending_when_no_run_recorded(repo):
    store = FakeStore()
    evaluator = TaskStatusEvaluator(repo, store, InputResolver(), "", "")

    status, inputs, run = evaluator.status(_task(repo))

    assert status is TaskStatus.EXECUTION_PENDING
    assert run is None
    assert [str(i) for i in inputs.inputs] == ["in.txt"]
    assert store.queries == [("app", "build", str(inputs.digest()))]


def test_run_exist(repo):
    task = _task(repo)
    store = FakeStore()
    expected = Inputs(_file_inputs(repo, task))
    store.add("app", "build", str(expected.digest()), "run-1")

    status, inputs, run = TaskStatusEvaluator(repo, store, InputResolver()).status(task)

    assert status is TaskStatus.RUN_EXIST
    assert run == "run-1"
    assert inputs.digest() == expected.digest()


def test_input_str_is_part_of_inputs(repo):
    task = _task(repo)
    store = FakeStore()
    evaluator = TaskStatusEvaluator(repo, store, InputResolver(), "extra", "")

    status, inputs, _ = evaluator.status(task)

    assert status is TaskStatus.EXECUTION_PENDING
    assert [str(i) for i in inputs.inputs] == ["in.txt", "string:extra"]
    without_str = Inputs(_file_inputs(repo, task))
    assert inputs.digest() != without_str.digest()


def test_lookup_input_str_finds_run(repo):
    task = _task(repo)
    store = FakeStore()
    lookup = Inputs([*_file_inputs(repo, task), InputString("lookup")])
    store.add("app", "build", str(lookup.digest()), "run-lookup")

    evaluator = TaskStatusEvaluator(repo, store, InputResolver(), "mine", "lookup")
    status, inputs, run = evaluator.status(task)

    assert status is TaskStatus.RUN_EXIST
    assert run == "run-lookup"
    assert [str(i) for i in inputs.inputs] == ["in.txt", "string:mine"]
    assert len(store.queries) == 2


def test_lookup_not_queried_when_run_exists(repo):
    task = _task(repo)
    store = FakeStore()
    own = Inputs([*_file_inputs(repo, task), InputString("mine")])
    store.add("app", "build", str(own.digest()), "run-own")

    evaluator = TaskStatusEvaluator(repo, store, InputResolver(), "mine", "lookup")
    status, _, run = evaluator.status(task)

    assert status is TaskStatus.RUN_EXIST
    assert run == "run-own"
    assert len(store.queries) == 1


def test_lookup_miss_stays_pending(repo):
    store = FakeStore()
    evaluator = TaskStatusEvaluator(repo, store, InputResolver(), "", "lookup")

    status, _, run = evaluator.status(_task(repo))

    assert status is TaskStatus.EXECUTION_PENDING
    assert run is None
    assert len(store.queries) == 2


def test_store_errors_propagate(repo):
    evaluator = TaskStatusEvaluator(repo, BrokenStore(), InputResolver())
    with pytest.raises(ConnectionError):
        evaluator.status(_task(repo))


def test_resolve_errors_propagate(repo):
    task = Task(
        app_name="app",
        name="build",
        directory=repo,
        unresolved_inputs=TaskInputs(files=[FileInputs(paths=["*.missing"])]),
    )
    evaluator = TaskStatusEvaluator(repo, FakeStore(), InputResolver())
    with pytest.raises(ValueError):
        evaluator.status(task)