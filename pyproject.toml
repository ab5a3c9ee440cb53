[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "safedrop"
version = "1.0.0"
description = "Burn-after-reading encrypted file drop: a small TCP server that stores files under AES-256-CBC and deletes them after a download limit or expiry."
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["file-sharing", "encryption", "aes", "burn-after-reading", "tcp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: File Sharing",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
safedrop-server = "safedrop.server:main"
safedrop-client = "safedrop.client:main"
safedrop-demo = "safedrop.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["safedrop"]

[tool.pytest.ini_options]
addopts = "-ra"
