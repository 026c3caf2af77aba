"""setuptools setup for HustleQuest.

Install for development:
    pip install -e ".[test]"
    pytest
"""

from setuptools import setup, find_packages

setup(
    name="HustleQuest",
    version="0.1.0",
    description="XP, levels and focus sessions for daily outreach work",
    packages=find_packages(include=["hustlequest", "hustlequest.*"]),
    python_requires=">=3.10",
    install_requires=[
        "SQLAlchemy>=2.0",
        "PyQt6>=6.5",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["hustlequest=hustlequest.__main__:main"],
    },
)
