[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gwugens"
version = "0.1.0"
description = "Unit generators, live sampling, clustering, L-systems, OSC messaging and file I/O for sound synthesis"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "synthesis", "ugen", "osc", "kmeans", "knn", "l-system", "sampler"]
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
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gwugens"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
