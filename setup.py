# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="confdoc",
    version="0.3.0",
    description="Generate reference documentation for dataclass configurations and their command-line flags",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["confdoc", "confdoc.*"]),
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0",  # Structured document output
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'confdoc=confdoc.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
