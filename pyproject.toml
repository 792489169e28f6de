[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xbundle"
version = "0.1.0"
description = "Packaging helpers: PRI resource files, MSIX package XML parts and Maven coordinates and version ranges"
requires-python = ">=3.10"
dependencies = []
keywords = ["pri", "msix", "appx", "maven", "pom", "version-range", "packaging", "build"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xbundle"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
