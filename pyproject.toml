[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stylusvm"
version = "0.1.0"
description = "Solidity-compatible persistent storage accessors and call context over an in-memory EVM-style host"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = ["evm", "storage", "solidity", "smart-contracts", "keccak"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["stylusvm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
