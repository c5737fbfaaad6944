# setup.py
from setuptools import setup, find_packages

setup(
    name="site_harvest",
    version="0.1.0",
    description="Depth-bounded website crawler that saves page text and documents by page lineage",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"site_harvest.report": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "soupsieve>=2.5",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site_harvest=site_harvest.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
