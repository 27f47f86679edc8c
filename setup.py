# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

import os
import re

from setuptools import find_packages, setup


def read_version():
    init_path = os.path.join(os.path.dirname(__file__), "chaoscv", "__init__.py")
    with open(init_path, encoding="utf-8") as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
    if not match:
        raise RuntimeError("Unable to find __version__ in chaoscv/__init__.py")
    return match.group(1)


setup(
    name="chaoscv",
    version=read_version(),
    author="Wahyu Ardiansyah",
    description="Reference-counted NCHW tensors with views, deep copy and text rendering",
    license="Apache-2.0",
    packages=find_packages(include=["chaoscv", "chaoscv.*"]),
    python_requires=">=3.9",
    install_requires=["numpy>=1.22"],
    extras_require={
        "test": ["pytest>=7.0", "hypothesis>=6.0"],
    },
    entry_points={
        "console_scripts": ["chaoscv=chaoscv.cli:main"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
)
