[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mdbinder"
version = "0.1.0"
description = "Load Markdown books from a SUMMARY.md outline and plan their preprocessing pipeline"
requires-python = ">=3.11"
keywords = ["markdown", "book", "summary", "outline", "preprocessor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: Markdown",
]
dependencies = [
    "markdown-it-py",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mdbinder-nop = "mdbinder.pipeline:main"

[tool.hatch.build.targets.wheel]
packages = ["mdbinder"]

[tool.pytest.ini_options]
addopts = "-ra"
