from setuptools import setup, find_packages

setup(
    name="dir-lister",
    version="1.0.0",
    description="Colourised listing of the current directory with UTC modification times",
    author="Ashwin Nair",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0",
        "rich>=13.0",
        "argcomplete>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "file-list = apps.cli:cli_file_list"
        ],
    },
)
