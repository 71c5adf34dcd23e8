[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mmpde"
version = "0.1.0"
description = "Moving mesh PDE method for two-dimensional triangular meshes"
requires-python = ">=3.10"
keywords = ["moving mesh", "mmpde", "mesh adaptation", "triangular mesh", "r-adaptivity", "r-tree"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mmpde"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
