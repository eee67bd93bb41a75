from setuptools import setup, find_packages


setup(
    name="detzip",
    version="0.1",
    packages=find_packages(include=["detzip", "detzip.*"]),
    description="Byte-reproducible ZIP archives and a cross-encoder equivalence verifier.",
    author="vercingetorx",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
    entry_points={
        "console_scripts": [
            "detzip=detzip.cli:main",
        ]
    },
)
