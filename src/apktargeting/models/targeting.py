"""Targeting value models: per-dimension targeting and the aggregates carrying them."""

from __future__ import annotations

from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..domain.dimensions import TargetingDimension


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Dimension values ---


class MultiAbi(_Frozen):
    """A set of ABIs served together by one artifact."""

    abi: tuple[str, ...] = Field(default=(), description="ABI platform names")


class ScreenDensity(_Frozen):
    """A density given either as a named alias or as a raw DPI."""

    density_alias: str | None = Field(default=None, description="Named alias, e.g. 'XHDPI'")
    density_dpi: int | None = Field(default=None, ge=0, description="Raw density in DPI")

    @model_validator(mode="after")
    def _exactly_one(self) -> ScreenDensity:
        if (self.density_alias is None) == (self.density_dpi is None):
            raise ValueError("ScreenDensity needs exactly one of density_alias or density_dpi")
        return self


class SdkVersion(_Frozen):
    """Minimum platform API level."""

    min: int = Field(default=0, ge=0, description="Minimum SDK version (inclusive)")


# --- Dimension targeting ---


class AbiTargeting(_Frozen):
    value: tuple[str, ...] = Field(default=(), description="ABIs this artifact declares")
    alternatives: tuple[str, ...] = Field(default=(), description="ABIs covered by siblings")


class MultiAbiTargeting(_Frozen):
    value: tuple[MultiAbi, ...] = Field(default=())
    alternatives: tuple[MultiAbi, ...] = Field(default=())


class ScreenDensityTargeting(_Frozen):
    value: tuple[ScreenDensity, ...] = Field(default=())
    alternatives: tuple[ScreenDensity, ...] = Field(default=())


class LanguageTargeting(_Frozen):
    value: tuple[str, ...] = Field(default=(), description="Language codes, e.g. 'en'")
    alternatives: tuple[str, ...] = Field(default=())


class SdkVersionTargeting(_Frozen):
    value: tuple[SdkVersion, ...] = Field(default=())
    alternatives: tuple[SdkVersion, ...] = Field(default=())


class TextureCompressionFormatTargeting(_Frozen):
    value: tuple[str, ...] = Field(default=(), description="Format names, e.g. 'astc'")
    alternatives: tuple[str, ...] = Field(default=())


class DeviceTierTargeting(_Frozen):
    value: tuple[str, ...] = Field(default=(), description="Tier names, e.g. 'low'")
    alternatives: tuple[str, ...] = Field(default=())


class CountrySetTargeting(_Frozen):
    value: tuple[str, ...] = Field(default=(), description="Country set names")
    alternatives: tuple[str, ...] = Field(default=())


class SdkRuntimeTargeting(_Frozen):
    value: tuple[bool, ...] = Field(default=(), description="Whether the SDK runtime is required")
    alternatives: tuple[bool, ...] = Field(default=())


class SanitizerTargeting(_Frozen):
    value: tuple[str, ...] = Field(default=(), description="Sanitizer aliases, e.g. 'hwaddress'")
    alternatives: tuple[str, ...] = Field(default=())


DimensionTargeting = Union[
    AbiTargeting,
    MultiAbiTargeting,
    ScreenDensityTargeting,
    LanguageTargeting,
    SdkVersionTargeting,
    TextureCompressionFormatTargeting,
    DeviceTierTargeting,
    CountrySetTargeting,
    SdkRuntimeTargeting,
    SanitizerTargeting,
]

DIMENSION_TARGETING_TYPES: dict[TargetingDimension, type] = {
    TargetingDimension.abi: AbiTargeting,
    TargetingDimension.multi_abi: MultiAbiTargeting,
    TargetingDimension.screen_density: ScreenDensityTargeting,
    TargetingDimension.language: LanguageTargeting,
    TargetingDimension.sdk_version: SdkVersionTargeting,
    TargetingDimension.texture_compression_format: TextureCompressionFormatTargeting,
    TargetingDimension.device_tier: DeviceTierTargeting,
    TargetingDimension.country_set: CountrySetTargeting,
    TargetingDimension.sdk_runtime: SdkRuntimeTargeting,
    TargetingDimension.sanitizer: SanitizerTargeting,
}


def is_empty_targeting(targeting: DimensionTargeting) -> bool:
    """True when the targeting declares neither values nor alternatives."""
    return not targeting.value and not targeting.alternatives


# --- Aggregates ---


class BaseAggregateTargeting(_Frozen):
    """Mapping from dimension to its targeting; absent fields do not discriminate."""

    SUPPORTED_DIMENSIONS: ClassVar[tuple[TargetingDimension, ...]] = ()

    def supports(self, dimension: TargetingDimension) -> bool:
        return dimension in self.SUPPORTED_DIMENSIONS

    def has(self, dimension: TargetingDimension) -> bool:
        return self.supports(dimension) and getattr(self, dimension.value) is not None

    def dimensions(self) -> tuple[TargetingDimension, ...]:
        """Dimensions present on this aggregate, in declared order."""
        return tuple(d for d in self.SUPPORTED_DIMENSIONS if getattr(self, d.value) is not None)

    def get(self, dimension: TargetingDimension) -> DimensionTargeting | None:
        if not self.supports(dimension):
            return None
        return getattr(self, dimension.value)


class ApkTargeting(BaseAggregateTargeting):
    """Targeting of a single generated APK."""

    SUPPORTED_DIMENSIONS: ClassVar[tuple[TargetingDimension, ...]] = (
        TargetingDimension.abi,
        TargetingDimension.multi_abi,
        TargetingDimension.screen_density,
        TargetingDimension.language,
        TargetingDimension.sdk_version,
        TargetingDimension.texture_compression_format,
        TargetingDimension.device_tier,
        TargetingDimension.country_set,
        TargetingDimension.sanitizer,
    )

    abi: AbiTargeting | None = None
    multi_abi: MultiAbiTargeting | None = None
    screen_density: ScreenDensityTargeting | None = None
    language: LanguageTargeting | None = None
    sdk_version: SdkVersionTargeting | None = None
    texture_compression_format: TextureCompressionFormatTargeting | None = None
    device_tier: DeviceTierTargeting | None = None
    country_set: CountrySetTargeting | None = None
    sanitizer: SanitizerTargeting | None = None


class VariantTargeting(BaseAggregateTargeting):
    """Targeting shared by every APK of a variant."""

    SUPPORTED_DIMENSIONS: ClassVar[tuple[TargetingDimension, ...]] = (
        TargetingDimension.sdk_version,
        TargetingDimension.abi,
        TargetingDimension.multi_abi,
        TargetingDimension.screen_density,
        TargetingDimension.texture_compression_format,
        TargetingDimension.sdk_runtime,
    )

    sdk_version: SdkVersionTargeting | None = None
    abi: AbiTargeting | None = None
    multi_abi: MultiAbiTargeting | None = None
    screen_density: ScreenDensityTargeting | None = None
    texture_compression_format: TextureCompressionFormatTargeting | None = None
    sdk_runtime: SdkRuntimeTargeting | None = None


class AssetsDirectoryTargeting(BaseAggregateTargeting):
    """Targeting attached to an assets or native-library sub-directory."""

    SUPPORTED_DIMENSIONS: ClassVar[tuple[TargetingDimension, ...]] = (
        TargetingDimension.abi,
        TargetingDimension.language,
        TargetingDimension.texture_compression_format,
        TargetingDimension.device_tier,
        TargetingDimension.country_set,
    )

    abi: AbiTargeting | None = None
    language: LanguageTargeting | None = None
    texture_compression_format: TextureCompressionFormatTargeting | None = None
    device_tier: DeviceTierTargeting | None = None
    country_set: CountrySetTargeting | None = None


AggregateTargeting = Union[ApkTargeting, VariantTargeting, AssetsDirectoryTargeting]


class TargetedAssetsDirectory(_Frozen):
    """An assets directory path together with the targeting parsed from it."""

    path: str = Field(..., description="Directory path inside the module, e.g. 'assets/tex#tcf_astc'")
    targeting: AssetsDirectoryTargeting = Field(default_factory=AssetsDirectoryTargeting)


class Assets(_Frozen):
    """All targeted assets directories of one module."""

    directory: tuple[TargetedAssetsDirectory, ...] = Field(default=())
