"""Services: device matching over build results."""

from .device_matcher import DeviceMatcher

__all__ = [
    "DeviceMatcher",
]
