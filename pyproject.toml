[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "notifykit"
version = "0.1.0"
description = "File system event model, file IDs, a file ID cache and event debouncers"
requires-python = ">=3.10"
dependencies = []
keywords = ["filesystem", "events", "debounce", "inode", "file-id", "rename"]
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
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
notifykit-file-id = "notifykit.file_id:main"

[tool.hatch.build.targets.wheel]
packages = ["notifykit"]

[tool.hatch.build.targets.sdist]
include = ["notifykit", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
