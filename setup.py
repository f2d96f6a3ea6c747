import re
import os
from setuptools import find_packages, setup

with open("README.md", "r") as readme:
    long_description = readme.read()

# Single source of truth for the version is LingoAPI.VERSION
with open(os.path.join("lingo_python_api", "lingo_api.py"), "r") as f:
    version = re.search(r'VERSION: str = "([^"]+)"', f.read()).group(1)

setup(
    name="lingo_python_api",
    version=version,
    description="Python client for the Lingo digital asset management API.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    keywords=[
        "lingo",
        "dam",
        "digital-asset-management",
        "brand",
        "python",
        "api",
    ],
    python_requires=">=3.9",
    install_requires=[
        "requests >= 2.32.3",
        "loguru >= 0.7.3",
        "pydantic >= 2.0",  # Response models in datatypes.py
        "click >= 8.0",  # For the CLI
        "beartype >= 0.20.2",  # Runtime type checking of public methods
    ],
    extras_require={
        "dev": [
            "pytest >= 8.3.4",
            "build >= 1.2.2.post1",
            "twine >= 6.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lingo=lingo_python_api.__main__:cli",
        ],
    },
)
