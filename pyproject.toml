[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "slidekit"
version = "0.1.0"
description = "Building blocks for meeting services: model definition parsing, permission rules, message-bus streams and shared metrics."
requires-python = ">=3.10"
keywords = ["permissions", "models", "yaml", "redis", "streams", "metrics", "meetings"]
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
    "Topic :: Software Development :: Libraries",
]
dependencies = [
    "pyyaml>=6.0",
    "redis>=4.5",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
slidekit-perms = "slidekit.catalog:main"

[tool.hatch.build.targets.wheel]
packages = ["slidekit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
