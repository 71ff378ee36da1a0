from ._agent import MockAgentConfig
from ._agent import config


__all__ = ["MockAgentConfig", "config"]
