"""
setup.py for the qpgraph Python package.

Install in development mode from the repository root:
    pip install -e python/

Run the test suite:
    pip install -e "python/[dev]"
    pytest tests/python
"""

from setuptools import find_packages, setup

setup(
    name="qpgraph",
    version="0.1.0",
    description="Active-set QP/LP solver over sparse linear factor graphs",
    packages=find_packages(),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "hypothesis>=6.0",
            "black>=23.0",
            "ruff>=0.1.0",
            "mypy>=1.0",
        ],
    },
)
