"""PartyBooth Database Models."""

from booth.models.device import DeviceCredential
from booth.models.session import PhotoSession, TempPhoto

__all__ = [
    "DeviceCredential",
    "PhotoSession",
    "TempPhoto",
]
