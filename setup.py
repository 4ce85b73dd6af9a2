from setuptools import find_packages, setup

with open("requirements.txt", "r", encoding="UTF-8") as f:
    required = f.read().splitlines()

setup(
    name="ethmarket",
    version="0.1",
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"ethmarket": ["abis/*.json"]},
    install_requires=required,
    extras_require={"test": ["pytest"]},
)
