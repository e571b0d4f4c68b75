# setup.py
from setuptools import setup, find_packages

setup(
    name="solver_harness",
    version="0.1.0",
    description="Load foreign solver libraries and differentially test them against a reference",
    packages=find_packages(exclude=("tests", "tests.*", "examples", "examples.*")),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "fastapi",
        "pydantic>=2",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "solver-harness = solver_harness.cli:main",
        ],
    },
)
