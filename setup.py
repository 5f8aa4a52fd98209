from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="refminer",
    version="0.1.0",
    description="Reference discovery for Wikidata items from structured data on linked pages",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="refminer Contributors",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    install_requires=[
        "httpx>=0.24.0",
        "beautifulsoup4>=4.12.0",
        "duckdb>=0.9.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "refminer=refminer.cli:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
    keywords="wikidata references citations microdata json-ld crawler",
)
