"""Setup configuration for the Fitbit activity & sleep EDA pipeline."""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="fitbit-eda",
    version="1.0.0",
    author="Fitbit EDA Pipeline Team",
    description="Exploratory analysis pipeline for Fitbit daily activity and sleep extracts",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pandas>=2.0.0",
        "numpy>=1.20.0",
    ],
    extras_require={
        "viz": ["matplotlib>=3.3.0"],
        "dev": [
            "matplotlib>=3.3.0",
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
            "black>=21.0",
            "flake8>=3.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "fitbit-eda=fitbit_eda.run_pipeline:main",
        ],
    },
)
