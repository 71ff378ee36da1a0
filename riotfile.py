# type: ignore
from riot import Venv


latest = ""

PYTHON_VERSIONS = ["3.8", "3.9", "3.10", "3.11", "3.12", "3.13"]


venv = Venv(
    pkgs={
        "mock": latest,
        "pytest": latest,
        "hypothesis": latest,
        "coverage": latest,
        "pytest-cov": latest,
    },
    env={
        "DD_MOCK_AGENT_LOGGING_RATE": "0",
    },
    venvs=[
        Venv(
            name="ddmock",
            pys=PYTHON_VERSIONS,
            command="pytest {cmdargs} tests/",
            pkgs={
                "msgpack": ["~=1.0.0", latest],
                "attrs": ["~=20.1", latest],
            },
        ),
    ],
)
