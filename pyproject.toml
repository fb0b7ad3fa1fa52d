[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "li7fit"
version = "0.1.0"
description = "Chi-square fitting of simulated line shapes to excitation-energy spectra, with kinematics and rate helpers"
requires-python = ">=3.10"
keywords = ["nuclear physics", "spectrum fitting", "chi-square", "powell", "kinematics", "cross section"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
    "scipy",
    "matplotlib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["li7fit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
