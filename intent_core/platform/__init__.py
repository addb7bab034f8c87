from .client import PlatformClient
from .exceptions import PlatformAPIError, PlatformAuthError
from .schemas import DetectedIntent, DetectionResponse, FlowListing

__all__ = [
    "PlatformClient",
    "PlatformAPIError",
    "PlatformAuthError",
    "DetectedIntent",
    "DetectionResponse",
    "FlowListing",
]
