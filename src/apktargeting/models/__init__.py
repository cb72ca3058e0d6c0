"""Targeting, device and build-result models."""

from .build_result import (
    BASE_MODULE_NAME,
    ApkDescription,
    ApkSet,
    BuildApksResult,
    InstantApkMetadata,
    ModuleMetadata,
    SplitApkMetadata,
    StandaloneApkMetadata,
    SystemApkMetadata,
    Variant,
)
from .device import DeviceSpec
from .targeting import (
    AbiTargeting,
    ApkTargeting,
    Assets,
    AssetsDirectoryTargeting,
    CountrySetTargeting,
    DeviceTierTargeting,
    LanguageTargeting,
    MultiAbi,
    MultiAbiTargeting,
    SanitizerTargeting,
    ScreenDensity,
    ScreenDensityTargeting,
    SdkRuntimeTargeting,
    SdkVersion,
    SdkVersionTargeting,
    TargetedAssetsDirectory,
    TextureCompressionFormatTargeting,
    VariantTargeting,
)

__all__ = [
    # Targeting
    "AbiTargeting",
    "ApkTargeting",
    "Assets",
    "AssetsDirectoryTargeting",
    "CountrySetTargeting",
    "DeviceTierTargeting",
    "LanguageTargeting",
    "MultiAbi",
    "MultiAbiTargeting",
    "SanitizerTargeting",
    "ScreenDensity",
    "ScreenDensityTargeting",
    "SdkRuntimeTargeting",
    "SdkVersion",
    "SdkVersionTargeting",
    "TargetedAssetsDirectory",
    "TextureCompressionFormatTargeting",
    "VariantTargeting",
    # Device
    "DeviceSpec",
    # Build results
    "BASE_MODULE_NAME",
    "ApkDescription",
    "ApkSet",
    "BuildApksResult",
    "InstantApkMetadata",
    "ModuleMetadata",
    "SplitApkMetadata",
    "StandaloneApkMetadata",
    "SystemApkMetadata",
    "Variant",
]
