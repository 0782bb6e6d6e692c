[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "limbscript"
version = "0.1.0"
description = "Generate and run stack-machine scripts for big-integer arithmetic on 30-bit limbs"
requires-python = ">=3.10"
keywords = ["script", "stack machine", "bigint", "limbs", "code generation"]
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
    "Topic :: Software Development :: Code Generators",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["limbscript"]

[tool.pytest.ini_options]
addopts = "-ra"
