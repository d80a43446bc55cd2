# setup.py
from setuptools import setup, find_packages

setup(
    name="exprlang",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=["numpy"],
    extras_require={"test": ["pytest", "hypothesis"]},
    zip_safe=False,
)
