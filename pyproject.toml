[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "smithsql"
version = "0.1.0"
description = "Seeded random SQL statement generator and fuzzing harness for in-memory SQLite databases"
requires-python = ">=3.10"
keywords = ["sql", "sqlite", "fuzzing", "testing", "query-generator"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Testing",
]
dependencies = [
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
smithsql-executor = "smithsql.executor:main"
smithsql-server = "smithsql.server:main"

[tool.hatch.build.targets.wheel]
packages = ["smithsql"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
