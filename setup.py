from __future__ import annotations

from setuptools import find_packages, setup

from config.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

if __name__ == "__main__":
    setup(
        name="envbind",
        version=PROJECT_VERSION,
        description="Bind configuration fields to environment variables and command-line flags",
        python_requires=PYTHON_REQUIRES_SPECIFIER,
        packages=find_packages(include=["envbind", "envbind.*"]),
        install_requires=[
            "pydantic>=2.5",
            "pydantic-core>=2.14",
            "python-dotenv>=1.0",
            "loguru>=0.7",
        ],
        extras_require={
            "test": [
                "pytest>=7.4",
                "hypothesis>=6.88",
            ],
        },
        entry_points={"console_scripts": ["envbind=envbind.cli:main"]},
    )
