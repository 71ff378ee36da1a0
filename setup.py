from pathlib import Path

from setuptools import find_packages
from setuptools import setup


HERE = Path(__file__).resolve().parent


def get_long_description():
    readme = HERE / "README.md"
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="ddmock",
    version="0.1.0",
    description="Mock Datadog agent collecting traces for test assertions",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    license="BSD-3-Clause",
    packages=find_packages(exclude=["tests*"]),
    package_data={
        "ddmock": ["py.typed"],
    },
    zip_safe=False,
    python_requires=">=3.8",
    install_requires=[
        "attrs>=20",
        "envier~=0.6",
        "msgpack>=1.0.0",
    ],
    extras_require={
        "testing": [
            "hypothesis",
            "mock",
            "pytest",
            "riot",
        ],
    },
    entry_points={
        "pytest11": [
            "ddmock = ddmock.contrib.pytest.plugin",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Framework :: Pytest",
        "Topic :: Software Development :: Testing",
    ],
)
