import os
import sys

import pytest

from baur.task import Task
from baur.taskrunner import TaskRunner


def make_task(tmp_path, code):
    return Task(
        directory=str(tmp_path),
        app_name="app",
        name="build",
        command=[sys.executable, "-c", code],
    )


def test_run_success_captures_output(tmp_path):
    result = TaskRunner().run(make_task(tmp_path, "print('building app')"))
    assert result.exit_code == 0
    assert "building app" in result.str_output
    assert result.start_time <= result.stop_time
    assert result.command[0] == sys.executable


def test_run_in_task_directory(tmp_path):
    result = TaskRunner().run(make_task(tmp_path, "import os; print(os.getcwd())"))
    reported = os.path.normcase(os.path.realpath(result.str_output.strip()))
    assert reported == os.path.normcase(os.path.realpath(str(tmp_path)))


def test_nonzero_exit_code_is_returned(tmp_path):
    code = "import sys; sys.stderr.write('bad'); sys.exit(3)"
    result = TaskRunner().run(make_task(tmp_path, code))
    assert result.exit_code == 3
    assert "bad" in result.str_output


def test_empty_command_raises(tmp_path):
    with pytest.raises(ValueError, match="command is empty"):
        TaskRunner().run(Task(directory=str(tmp_path), app_name="a", name="b"))


def test_missing_program_raises(tmp_path):
    task = Task(directory=str(tmp_path), command=[str(tmp_path / "no-such-program")])
    with pytest.raises(OSError):
        TaskRunner().run(task)