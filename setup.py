# pylint: disable=missing-module-docstring
# ruff: noqa

from pathlib import Path

from setuptools import find_packages, setup


def read_long_description() -> str:
    """Return README contents for PyPI description."""
    readme_path = Path(__file__).with_name("README.md")
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else "Niche Radar"


setup(
    name="niche-radar",
    version="0.1.0",
    description="Niche-aware trend ranking and social enrichment pipeline",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.11",
    packages=find_packages(include=["niche_radar", "niche_radar.*", "fetchers", "fetchers.*"]),
    include_package_data=True,
    install_requires=[
        "pandas>=2.0",
        "httpx>=0.26",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "anthropic>=0.30",
        "openai>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "niche-radar = niche_radar.cli_entrypoints:reddit",
            "niche-radar-google = niche_radar.cli_entrypoints:google",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
