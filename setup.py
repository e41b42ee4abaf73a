#!/usr/bin/env python3
"""
Setup script for the Tracked Attachments Console application.
"""

from setuptools import setup, find_packages
import os

# Read the contents of README file
this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

# Read requirements
with open(os.path.join(this_directory, 'requirements.txt')) as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith('#')]

setup(
    name="tracked-attachments-console",
    version="1.0.0",
    description="Desktop console for managing tracked email attachments on a remote admin API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="ExDevPro",
    author_email="",
    packages=find_packages(exclude=['tests', 'tests.*']),
    py_modules=['main'],
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        'test': ['pytest>=7.0'],
    },
    python_requires=">=3.8",
    entry_points={
        'console_scripts': [
            'tracked-attachments-console=main:main',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Communications :: Email",
        "Topic :: Office/Business",
    ],
    package_data={
        'config': ['*.json'],
    },
)
