[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xtwsd"
version = "0.2.0"
description = "Helpers for XTide tide-station data, a station-definition JSON Schema, and a client that imports NOS station data into an xtwsd server"
requires-python = ">=3.10"
dependencies = []
keywords = ["tides", "currents", "xtide", "harmonics", "oceanography", "json-schema"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Oceanography",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nos2xt = "xtwsd.nos2xt:main"

[tool.hatch.build.targets.wheel]
packages = ["xtwsd"]

[tool.pytest.ini_options]
addopts = "-ra"
