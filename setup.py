from setuptools import find_packages, setup

setup(
    name="signedlic",
    version="0.1.0",
    packages=find_packages(include=["signedlic", "signedlic.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "cryptography>=37",
        "requests",
        "click",
        "protobuf>=4.22",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "signedlic=signedlic.cli:cli",
        ],
    },
)
