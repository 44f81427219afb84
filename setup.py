from __future__ import annotations

from setuptools import find_packages, setup

from configdoc.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

if __name__ == "__main__":
    setup(
        name="configdoc",
        version=PROJECT_VERSION,
        description="Reference documentation extracted from typed configuration sections",
        python_requires=PYTHON_REQUIRES_SPECIFIER,
        packages=find_packages(include=["configdoc", "configdoc.*"]),
        package_data={"configdoc": ["VERSION"]},
        install_requires=[
            "pydantic>=2.10",
            "loguru>=0.7",
            "python-dotenv>=1.0",
            "tomli>=2.0; python_version < '3.11'",
            "tomli-w>=1.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.4",
                "hypothesis>=6.90",
            ],
        },
        entry_points={
            "console_scripts": ["configdoc=configdoc.cli:main"],
        },
    )
