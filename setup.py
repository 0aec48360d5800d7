#!/usr/bin/env python3
"""
Setup configuration for spot-stream
Resolve Spotify track links to YouTube audio streams
"""

import re

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read version without importing the package (dependencies may be missing)
with open("spot_stream/version.py", "r", encoding="utf-8") as fh:
    version = re.search(r'__version__ = "([^"]+)"', fh.read()).group(1)

# Core requirements (always installed)
core_requirements = [
    "ytmusicapi>=1.3.2",
    "yt-dlp>=2023.12.30",
    "aiohttp>=3.9.1",
    "ffmpeg-python>=0.2.0",
    "rich-click>=1.7.0",
    "pyyaml>=6.0.1",
    "tqdm>=4.66.1",
    "python-dotenv>=1.0.0",
]

setup(
    name="spot-stream",
    version=version,
    author="spot-stream",
    description="Resolve Spotify track links to YouTube audio streams",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/spot-stream/spot-stream",
    packages=find_packages(include=["spot_stream", "spot_stream.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Internet :: WWW/HTTP",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "spot-stream=spot_stream.cli:main",
        ],
    },
    keywords="spotify youtube music stream audio",
    project_urls={
        "Bug Reports": "https://github.com/spot-stream/spot-stream/issues",
        "Source": "https://github.com/spot-stream/spot-stream",
    },
)
