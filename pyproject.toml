[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "baur"
version = "1.0.0"
description = "Building blocks for an incremental task runner: resolve task inputs, compute digests, run tasks and upload their outputs"
requires-python = ">=3.10"
dependencies = []
keywords = ["build", "monorepo", "incremental", "digest", "task-runner", "git", "glob"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["baur"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
