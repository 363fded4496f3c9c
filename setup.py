from setuptools import setup, find_packages

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    description="Detect silent data corruption by comparing checksums and metadata across runs.",
    entry_points={"console_scripts": ["bitscrub = bitscrub.cli.bitscrub:cli"]},
    include_package_data=True,
    install_requires=[
        "click>=7.0",
        "lxml>=4.4.1",
        "xxhash>=2.0.0",
        "defusedxml>=0.6.0",
    ],
    extras_require={"test": ["pytest", "pytest-mock"]},
    dependency_links=[],
    long_description=long_description,
    long_description_content_type="text/markdown",
    name="bitscrub",
    packages=find_packages(exclude=["tests", "tests.*"]),
    tests_require=["pytest", "pytest-mock"],
    version="0.1.0",
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3 :: Only",
        "License :: OSI Approved :: GNU Lesser General Public License v3 or later (LGPLv3+)",
        "Operating System :: OS Independent",
    ],
)
