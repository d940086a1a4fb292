#!/usr/bin/env python
"""
Ore client: plugin package manager for game server hosts
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Define required packages
required_packages = [
    "pydantic>=2.0.0",  # For repository response models
    "requests>=2.28.0", # For repository HTTP access
    "pyyaml>=6.0",      # For configuration file support
    "tabulate>=0.9.0",  # For formatted update reports
]

setup(
    name="oreclient",
    version="1.0.0",
    author="DarsheeeGamer",
    author_email="cleaverdeath@gmail.com",
    description="Plugin package manager client for Ore repositories",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=required_packages,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
