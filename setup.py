#!/usr/bin/env python3
"""
Setup configuration for snapshot-sync
Share a video library between devices through a single snapshot file
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "click>=8.1.7",
    "rich-click>=1.7.0",
    "rich>=13.0.0",
    "pyyaml>=6.0.1",
    "tqdm>=4.66.1",
]

setup(
    name="snapshot-sync",
    version="0.1.0",
    author="snapshot-sync Team",
    description="Merge and share a video client's library between devices through one JSON snapshot",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["snapshot_sync", "snapshot_sync.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Archiving :: Mirroring",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "snapsync=snapshot_sync.cli:main",
        ],
    },
    keywords="sync backup merge snapshot playlist watch-history cli",
)
