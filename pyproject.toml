[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crux"
version = "0.1.0"
description = "Build metadata, build output checks, bundler reports, module resolution, file watching and runtime VM helpers for Crucible resources"
requires-python = ">=3.10"
keywords = ["build", "runtime", "lima", "esbuild", "watch", "containers"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["crux"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
