"""Setup script for quick installation."""

from setuptools import find_packages, setup

setup(
    name="live-football",
    version="0.1.0",
    description="Live football odds dashboard, pressure analysis and bet ledger",
    author="Live Football Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "pandas>=2.1.0",
        "requests>=2.31.0",
        "sqlalchemy>=2.0.0",
        "click>=8.1.0",
        "rich>=13.5.0",
        "pydantic>=2.3.0",
        "pydantic-settings>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "live-football=live_football.cli.main:main",
        ],
    },
)
