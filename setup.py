from setuptools import setup, find_packages

setup(
    name="statekeeper",
    version="0.1.0",
    description="Guarded finite-state holder with reactive subscriptions",
    author="mseibert",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "statekeeper=statekeeper.main:main",
        ],
    },
)
