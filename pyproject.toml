[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ringmesh"
version = "0.1.0"
description = "Routing tables, routing roles, token-ring synchronisation and TCP peer links for a ring of cooperating mesh devices"
requires-python = ">=3.10"
dependencies = []
keywords = ["mesh", "routing", "token-ring", "networking", "wifi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ringmesh"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
