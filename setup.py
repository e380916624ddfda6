#!/usr/bin/env python
from setuptools import find_packages, setup

setup(
    name="drone-terraform",
    version="1.0.0",
    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    entry_points={
        "console_scripts": [
            "drone-terraform=drone_terraform.__main__:main",
        ]
    },
    install_requires=["requests", "cfgv", "python-dotenv", "boto3"],
    extras_require={"test": ["pytest>=7"]},
)
