[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "svctemplate"
version = "0.1.0"
description = "Service skeleton with coded errors, JSON routes, HTTP and gRPC servers and a cron job worker"
requires-python = ">=3.10"
keywords = ["service", "template", "http", "grpc", "cron", "error-codes", "flask"]
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
    "Framework :: Flask",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "flask",
    "grpcio",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
svctemplate = "svctemplate.app:main"

[tool.hatch.build.targets.wheel]
packages = ["svctemplate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
