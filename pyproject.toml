[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "biathlon"
version = "0.1.0"
description = "Process biathlon race event logs and produce final result reports"
requires-python = ">=3.10"
dependencies = []
keywords = ["biathlon", "race", "events", "report", "simulation"]
classifiers = [
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Topic :: Games/Entertainment :: Simulation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
biathlon = "biathlon.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["biathlon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
