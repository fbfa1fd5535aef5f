#!/usr/bin/env python3
"""
Setup script for the which engine.

This provides a minimal setup.py for the multi-path script sandbox and
outcome sampler, allowing for proper package installation and distribution.
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="which-engine",
    version="0.1.0",
    description="Deterministic multi-path script sandbox with an interference/diffraction outcome sampler",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["which_core", "which_core.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Education",
        "Topic :: Scientific/Engineering :: Physics",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "dev": ["pytest>=7.0.0", "pytest-cov>=2.12.0"],
    },
    entry_points={
        "console_scripts": [
            "which-engine=which_core.apps.engine.main:main",
        ],
    },
    package_data={
        "": ["*.yaml", "*.yml"],
    },
    include_package_data=True,
    zip_safe=False,
)
