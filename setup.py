import builtins

import setuptools
from setuptools import setup


def setup_package():
    builtins.__RDBSCAN_SETUP__ = True
    import rdbscan

    with open("README.md", "r") as f:
        readme = f.read()

    setup(
        name="rdbscan",
        version=rdbscan.__version__,
        license="AGPL",
        description="Planner for parallel, incremental reads from relational databases",
        long_description=readme,
        long_description_content_type="text/markdown",
        packages=setuptools.find_packages(exclude=["rdbscan.tests"]),
        entry_points={"console_scripts": ["rdbscan = rdbscan.cmdline:main"]},
        install_requires=[
            "SQLAlchemy>=2,<3",
            "click>=8",
            "python-dotenv",
            "pyaml_env",
            "boto3",
            "pydantic>=2.0.0",
        ],
        extras_require={"test": ["pytest>=7", "PyYAML"]},
    )


if __name__ == "__main__":
    setup_package()
