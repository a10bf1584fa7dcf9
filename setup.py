# setup.py
from setuptools import setup, find_packages

setup(
    name="marketing_scout",
    version="0.1.0",
    description="Асинхронный краулер маркетинговых URL MarketingScout",
    packages=find_packages(include=["marketing_scout", "marketing_scout.*"]),
    package_data={"marketing_scout.report": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "marketing-scout=marketing_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
