[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "elosscal"
version = "0.1.0"
description = "Silicon detector calibration and heavy-ion energy-loss comparison against LISE stopping-power tables"
requires-python = ">=3.10"
keywords = ["nuclear physics", "stopping power", "energy loss", "calibration", "LISE", "silicon detector"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
    "scipy",
    "matplotlib",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
elosscal-calibrate = "elosscal.calibration:main"
elosscal-energyloss = "elosscal.energyloss:main"
elosscal-plot = "elosscal.plotting:main"

[tool.hatch.build.targets.wheel]
packages = ["elosscal"]

[tool.pytest.ini_options]
addopts = "-ra"
