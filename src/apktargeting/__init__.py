"""Device targeting of APK splits: normalization, matching and classification."""

from .domain.dimensions import TargetingDimension
from .errors import (
    DimensionNotPresentError,
    IncompatibleDeviceError,
    InvalidTargetingError,
    TargetingError,
)
from .models import (
    ApkTargeting,
    AssetsDirectoryTargeting,
    BuildApksResult,
    DeviceSpec,
    Variant,
    VariantTargeting,
)

__version__ = "0.1.0"
__all__ = [
    "ApkTargeting",
    "AssetsDirectoryTargeting",
    "BuildApksResult",
    "DeviceSpec",
    "DimensionNotPresentError",
    "IncompatibleDeviceError",
    "InvalidTargetingError",
    "TargetingDimension",
    "TargetingError",
    "Variant",
    "VariantTargeting",
]
