[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "facekit"
version = "0.1.0"
description = "Face detection post-processing, alignment and embedding utilities with a lightweight tensor container"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["face detection", "face recognition", "anchors", "nms", "face alignment", "embedding"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["facekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
