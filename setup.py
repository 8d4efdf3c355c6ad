# setup.py
from setuptools import setup, find_packages

setup(
    name="contract-model",            # the *distribution* name on PyPI
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),  # will find contract_model/
    python_requires=">=3.10",
    install_requires=["pandas", "numpy"],  # DataFrame / Series / numpy leaves
    extras_require={
        "test": ["pytest"],
    },
    description="Declarative record types with runtime validation, coercion and JSON round-tripping",
    author="Your Name",
    license="Creative Commons Attribution-NonCommercial-ShareAlike 4.0 International License",
)
