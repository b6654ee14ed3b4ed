#!/usr/bin/env python3
"""
djay-sync - Setup Configuration
Copies djay tempo and key analysis into a Rekordbox collection or audio file tags
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core dependencies for basic functionality
core_requirements = [
    "mutagen>=1.47.0",      # Audio file tag reading/writing
    "tqdm>=4.66.0",         # Progress bars
    "python-dotenv>=1.0.0", # Environment variables
]

# Development dependencies
dev_requirements = [
    "pytest>=7.0.0",
    "pytest-cov>=4.0.0",
    "black>=23.0.0",
    "flake8>=6.0.0",
    "mypy>=1.0.0",
]

setup(
    # Package information
    name="djay-sync",
    version="1.0.0",
    description="Copy djay BPM and key analysis into your music library",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package discovery
    packages=find_packages(exclude=["tests*", "test_*", "*.tests*"]),
    include_package_data=True,

    # Dependencies
    install_requires=core_requirements,
    extras_require={
        "dev": dev_requirements,
        "test": ["pytest>=7.0.0", "pytest-cov>=4.0.0"],
    },

    # Console entry points
    entry_points={
        "console_scripts": [
            "djay-sync=djaysync.cli.main:main",
        ],
    },

    # Python version and classifiers
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Environment :: Console",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Utilities",
    ],

    # Keywords for PyPI search
    keywords=[
        "dj", "djay", "music", "metadata", "bpm", "key", "camelot",
        "rekordbox", "music-library", "grouping",
    ],

    zip_safe=False,
    platforms=["any"],
)
