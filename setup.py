#!/usr/bin/env python3
"""
Setup script for Strata.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="strata",
    version="0.1.0",
    description="Convention-routed controllers with a co-generated OpenAPI 3.1 document",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Strata Contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"strata": ["templates/*.html"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "click>=8.1.0",
        "jinja2>=3.1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.24.0",
            "jsonschema>=4.18.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "strata=strata.cli.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Software Development :: Libraries :: Application Frameworks",
    ],
    keywords="openapi routing controllers validation asgi api",
)
