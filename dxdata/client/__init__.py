from .api import DXApiClient

__all__ = ["DXApiClient"]
