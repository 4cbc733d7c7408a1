"""Setup configuration for the Automod Discord Bot."""

from setuptools import setup, find_packages

setup(
    name="automod",
    version="0.1.0",
    description="A rule-based automod engine for Discord guilds",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.5",
        "aiosqlite>=0.19",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "automod=automod.main:main",
        ],
    },
)
