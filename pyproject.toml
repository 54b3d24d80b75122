[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mqttedge"
version = "0.1.0"
description = "MQTT subscribe/unsubscribe packet handling, subscription and retain stores, client option parsing and benchmark helpers"
requires-python = ">=3.10"
keywords = ["mqtt", "broker", "subscribe", "mqtt5", "benchmark"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet",
    "Topic :: Communications",
]
dependencies = []

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mqttedge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
