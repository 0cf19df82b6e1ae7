[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oapicodegen"
version = "0.1.0"
description = "Describe OpenAPI 3 documents as Go types, parameters, bodies and operations for code generation"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["openapi", "swagger", "codegen", "go", "code-generation"]
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

[project.optional-dependencies]
test = [
    "pytest",
    "pyyaml",
]

[tool.hatch.build.targets.wheel]
packages = ["oapicodegen"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
