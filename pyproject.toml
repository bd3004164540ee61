[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edgesched"
version = "0.1.0"
description = "Simulations of container scheduling, retention and prefetching strategies for edge and serverless computing"
requires-python = ">=3.10"
dependencies = []
keywords = ["edge computing", "serverless", "scheduling", "simulation", "containers", "cold start"]
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
    "Topic :: System :: Distributed Computing",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
edgesched-onco = "edgesched.onco:main"
edgesched-pbo = "edgesched.pbo:main"
edgesched-pagurus = "edgesched.pagurus:main"
edgesched-ldls = "edgesched.ldls:main"
edgesched-prefetch = "edgesched.prefetch:main"

[tool.hatch.build.targets.wheel]
packages = ["edgesched"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
