[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imagegate"
version = "0.1.0"
description = "Building blocks for an image-resizing HTTP service: endpoint path parsing, generation and signing, storage keys, seekable streams, WSGI middleware and local file storage."
requires-python = ">=3.10"
keywords = ["image", "thumbnail", "url", "signing", "hmac", "storage", "wsgi", "seekable", "stream"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["imagegate"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
