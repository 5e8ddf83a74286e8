# baur

`baur` is a library of building blocks for an incremental task runner in
monorepositories. It works out which files a task depends on and computes a
SHA-384 digest over them. It can ask a storage backend whether a run with the
same inputs was already recorded, run the task's command, and upload the files
and docker images the task produced.

The package has no dependencies beyond the standard library. Some parts run
the `git` command, so git must be installed to use them.

## Installation

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Modules

- `baur.task`: the `Task` dataclass and the dataclasses that describe its
  inputs and outputs. Inputs are `TaskInputs` and `FileInputs`, which hold
  glob paths and the `optional` and `git_tracked_only` flags. Outputs are
  `TaskOutputs`, `FileOutput` and `DockerImageOutput`, and the upload
  destinations are `S3Upload`, `FileCopy` and `DockerImageRegistryUpload`.
  `Task.id()` returns `<app>.<task>`. `sort_tasks_by_id` sorts a list of tasks
  in place. `TaskStatus` has the members `UNDEFINED`, `RUN_EXIST` and
  `EXECUTION_PENDING`.
- `baur.inputresolver`: `InputResolver.resolve(repository_dir, task)` resolves
  a task's file inputs, plus its `cfg_filepaths`, to deduplicated `InputFile`
  objects. It raises `ValueError` when a non-optional pattern matches no file.
  It keeps resolved patterns in an LRU cache of 512 entries, and
  `cache_statistics()` returns the cache's `CacheStatistics`.
- `baur.inputs`: `Digest` supports `str()`, `Digest.from_string` and
  `Digest.sum`. `InputFile` digests its repository relative path together
  with the file content. `InputString` digests a string, and `Inputs.digest()`
  sums the digests of all inputs. `input_add_str_if_not_empty` appends a
  string input. `diff_inputs(a, b)` returns a list of `InputDiff` sorted by
  path, whose states are `DiffType.DIGEST_MISMATCH`, `REMOVED` and `ADDED`.
- `baur.status`: `TaskStatusEvaluator(repository_dir, store, input_resolver,
  input_str, lookup_input_str).status(task)` returns the task status, the
  inputs and the recorded run. The store must provide
  `latest_task_run_by_digest(app_name, task_name, total_input_digest)`, and
  that method raises `TaskRunNotFoundError` when no run exists.
- `baur.taskrunner`: `TaskRunner.run(task)` executes the task's command in the
  task's directory. It returns a `RunResult` with the exit code, the combined
  output and the start and stop times. A non-zero exit code does not raise.
- `baur.outputs`: `OutputFile` and `OutputDockerImage`, the latter built with
  `OutputDockerImage.from_iid_file`. Their upload destinations are
  `UploadInfoS3`, `UploadInfoDocker` and `UploadInfoFileCopy`.
  `outputs_from_task(docker_client, task)` returns the outputs a task
  declares.
- `baur.uploader`: `Uploader(docker_client, s3_client, filecopy_uploader)`
  uploads an output to each of its destinations. It calls a start callback
  before each upload and a result callback with an `UploadResult` after it.
- `baur.filecopy`: `FileCopyClient`, an upload client that copies a file into
  a directory and creates the directory when it is missing. It can serve as
  the `filecopy_uploader` of an `Uploader`.
- `baur.git`: helpers around the git command. These are `commit_id`,
  `worktree_is_dirty`, `ls_files`, `is_git_dir` and `command_is_installed`,
  plus `RepositoryState`, which caches the commit ID and the worktree state.
- `baur.vcs`: `get_state(directory)` returns a `git.RepositoryState` for a git
  repository. Otherwise it returns a `NoVCSState`, whose methods raise
  `VCSRepositoryNotExistError`.
- `baur.glob` and `baur.gitpath`: `file_glob` and `GlobResolver` resolve glob
  patterns to files, and `**` matches directories recursively.
  `GitPathResolver` keeps only the files that git tracks.
- `baur.pool`: `Pool`, a thread pool with `queue(work_fn)` and `wait()`. It can
  also be used as a context manager.
- `baur.version`: `from_string` parses `<Major>[.<Minor>[.<Patch>[-appendix]]]`
  into a `SemVer`.

## Example

```python
from baur.inputresolver import InputResolver
from baur.inputs import Inputs
from baur.status import TaskRunNotFoundError, TaskStatusEvaluator
from baur.task import FileInputs, Task, TaskInputs


class MemoryStore:
    def __init__(self):
        self.runs = {}

    def latest_task_run_by_digest(self, app_name, task_name, total_input_digest):
        try:
            return self.runs[(app_name, task_name, total_input_digest)]
        except KeyError:
            raise TaskRunNotFoundError(total_input_digest) from None


task = Task(
    app_name="app",
    name="build",
    directory="/repo/app",
    repository_root="/repo",
    command=["make"],
    unresolved_inputs=TaskInputs(files=[FileInputs(paths=["**/*.c"])]),
)

resolver = InputResolver()
print(Inputs(resolver.resolve("/repo", task)).digest())

evaluator = TaskStatusEvaluator("/repo", MemoryStore(), resolver)
status, inputs, run = evaluator.status(task)
print(status)  # Pending
```

## What the package does not do

- It has no command-line program. It is used as a library.
- It does not read application or repository configuration files. Tasks are
  built in code from the dataclasses in `baur.task`.
- It has no database or other storage for task runs. `TaskStatusEvaluator`
  works with any object that provides `latest_task_run_by_digest`.
- It has no S3 or docker registry client. `Uploader` needs objects with an
  `upload` method for those. `OutputDockerImage` needs an object with `size`
  and `exists` methods. Only the file-copy client, `FileCopyClient`, is
  included.
- It does not resolve Go source inputs. File inputs are resolved from glob
  patterns only.