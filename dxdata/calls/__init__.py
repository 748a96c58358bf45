from .api import ApiRemoteCalls
from .base import RemoteCalls
from .memory import InMemoryPlatform

__all__ = ["ApiRemoteCalls", "InMemoryPlatform", "RemoteCalls"]
