#!/usr/bin/env python3
"""
Natrium - Setup Script

For development installation:
    pip install -e ".[dev]"
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read version from package
version = "0.1.0"

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text() if readme_path.exists() else ""

setup(
    name="natrium",
    version=version,
    description="Pluggable authenticated encryption over libsodium-compatible formats",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="Open Source",

    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",

    install_requires=[
        "cryptography>=3.4",
        "PyNaCl>=1.5",
        "pycryptodome>=3.15",
        "aeg",
        "toml>=0.10",
    ],

    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=3.0",
        ],
    },

    entry_points={
        "console_scripts": [
            "natrium=natrium.cli:main",
        ],
    },

    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Security :: Cryptography",
    ],

    keywords="encryption aead x25519 libsodium aegis xchacha20",
)
