from setuptools import setup, find_packages
import os

# Import version from CityTZ/__init__.py
import re
with open(os.path.join('CityTZ', '__init__.py'), 'r') as f:
    version = re.search(r"__version__\s*=\s*'(.*)'", f.read()).group(1)

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="CityTZ",
    version=version,
    description="City and timezone lookup with validation, caching, rate limiting and a REST API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(include=["CityTZ", "CityTZ.*"]),
    include_package_data=True,
    package_data={
        "CityTZ": ["data/*.json"],
    },
    python_requires=">=3.8",
    install_requires=[
        "pandas>=1.3.0",
        "flask>=2.2.0",
        "click>=8.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "citytz=CityTZ.cli.commands:main",
        ],
    },
)
