"""Setup script for the ruuvibridge package."""

from setuptools import find_packages, setup

setup(
    name="ruuvibridge",
    version="0.1.0",
    description="RuuviTag broadcast listener writing measurements to InfluxDB",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "python-dotenv",
        "bleak>=0.21",
        "aiohttp",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "black",
            "isort",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "ruuvibridge-listener=ruuvibridge.listener:main",
        ],
    },
)
