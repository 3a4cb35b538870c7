[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iftkit"
version = "0.1.0"
description = "Building blocks for incremental font transfer: sparse bit sets, font table access and binary helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["fonts", "opentype", "truetype", "incremental font transfer", "sparse bit set"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Text Processing :: Fonts",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["iftkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
