[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "healthwatch"
version = "0.1.0"
description = "Server health metrics for CPU, memory, disk and the host, with threshold classification, HTML alerts and summary reports"
requires-python = ">=3.10"
keywords = ["monitoring", "cpu", "memory", "disk", "alerts", "health"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
healthwatch = "healthwatch.snapshot:main"

[tool.hatch.build.targets.wheel]
packages = ["healthwatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
