"""
Setup script for densemat

Pure Python package in a src/ layout. This script:
1. Reads the version from src/densemat/__init__.py
2. Uses README.md (when present) as the long description
3. Declares runtime and test dependencies
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from src/densemat/__init__.py
def get_version():
    version_file = Path("src/densemat/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="densemat",
    version=get_version(),
    description="Dense matrix value type with explicit ownership and a cofactor-based algebra engine",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    zip_safe=True,
)
