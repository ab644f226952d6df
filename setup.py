"""
Setup script for Identity Relations
Install with: pip install -e .
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file, 'r', encoding='utf-8') as f:
        requirements = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith('#')
        ]

setup(
    name="identity-relations",
    version="1.0.0",
    description="Relation table queries for the identity console database (PostgreSQL)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["relations", "relations.*", "utils", "utils.*"]),
    # schema.sql is not installed with the modules: installed copies run init-db --schema FILE
    py_modules=[
        "cli",
        "config",
        "container",
        "database",
        "models",
        "repositories",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "identity-relations=cli:cli_entry",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="postgresql asyncpg relations many-to-many identity",
)
