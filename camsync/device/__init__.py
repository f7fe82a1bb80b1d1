"""Device access for camsync."""

from .interfaces import DeviceClient
from .yi_client import YiCameraClient

__all__ = ["DeviceClient", "YiCameraClient"]
