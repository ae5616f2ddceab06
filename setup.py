#!/usr/bin/env python3
"""Setup script for lgtv2mqtt package."""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="lgtv2mqtt",
    version="2.0.0",
    author="",
    author_email="",
    description="Control LG webOS Smart TVs via MQTT",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Home Automation",
    ],
    keywords="lg webos tv mqtt smart-tv home-automation",
    install_requires=[
        "paho-mqtt>=2.0.0",
        "pyyaml>=6.0",
        "bscpylgtv>=0.4.0",
        "websockets>=10.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "lgtv2mqtt=lgtv2mqtt.__main__:main",
        ],
    },
    python_requires=">=3.10",
)
