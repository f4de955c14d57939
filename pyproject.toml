[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bird_exporter"
version = "1.4.3"
description = "Prometheus metric exporter for the BIRD routing daemon"
requires-python = ">=3.10"
dependencies = []
keywords = ["bird", "prometheus", "exporter", "bgp", "ospf", "bfd", "routing", "monitoring"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bird_exporter = "bird_exporter.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bird_exporter"]

[tool.pytest.ini_options]
addopts = "-ra"
