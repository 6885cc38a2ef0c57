[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gridslam"
version = "0.1.0"
description = "Particle-filter grid SLAM building blocks and command-line tools for GFS log files"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "slam",
    "mapping",
    "particle-filter",
    "occupancy-grid",
    "robotics",
    "odometry",
    "laser",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gfs2log = "gridslam.gfs2log:main"
gfs2neff = "gridslam.gfs2neff:main"
gfs2rec = "gridslam.gfs2rec:main"

[tool.hatch.build.targets.wheel]
packages = ["gridslam"]

[tool.hatch.build.targets.sdist]
include = ["gridslam", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
