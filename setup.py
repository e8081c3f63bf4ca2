from setuptools import find_packages, setup

setup(
    name="tgrep",
    version="0.1.0",
    description="Threaded recursive content search",
    python_requires=">=3.11",
    packages=find_packages(include=["tgrep", "tgrep.*"]),
    install_requires=[
        "result>=0.17",
        "rich>=13.0",
        "typer>=0.12",
    ],
    extras_require={
        "test": ["pytest>=8.0", "typing_extensions>=4.4"],
    },
    entry_points={
        "console_scripts": [
            "tgrep=tgrep.cli:app",
        ],
    },
)
