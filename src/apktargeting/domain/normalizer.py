"""Canonical ordering of targeting descriptors.

Two descriptors that only differ in the order of their repeated fields
normalize to equal models. Unknown values are kept and ordered by their
literal after every known value; normalization never raises on them.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, TypeVar

from ..models.build_result import ApkDescription, ApkSet, Variant
from ..models.targeting import (
    AbiTargeting,
    ApkTargeting,
    Assets,
    AssetsDirectoryTargeting,
    BaseAggregateTargeting,
    CountrySetTargeting,
    DeviceTierTargeting,
    DimensionTargeting,
    LanguageTargeting,
    MultiAbi,
    MultiAbiTargeting,
    ScreenDensity,
    ScreenDensityTargeting,
    SdkRuntimeTargeting,
    SdkVersion,
    SanitizerTargeting,
    SdkVersionTargeting,
    TextureCompressionFormatTargeting,
    VariantTargeting,
)
from .dimensions import (
    NONE_DENSITY_VALUE,
    TargetingDimension,
    abi_sort_key,
    density_alias_dpi,
    sanitizer_sort_key,
)

T = TypeVar("T", bound=Hashable)
A = TypeVar("A", bound=BaseAggregateTargeting)


def _sorted_unique(items: Iterable[T], key: Callable[[T], Any] | None = None) -> tuple[T, ...]:
    return tuple(sorted(set(items), key=key))


# --- Sort keys ---


def screen_density_sort_key(density: ScreenDensity) -> tuple[int, int, int, str]:
    """Ascending DPI; NODPI after every positive density; unknown aliases last.

    At equal DPI the alias form sorts before the raw form.
    """
    if density.density_alias is not None:
        dpi = density_alias_dpi(density.density_alias)
        if dpi is None:
            return (2, 0, 0, density.density_alias)
        is_raw = 0
    else:
        dpi = density.density_dpi
        is_raw = 1
    if dpi == NONE_DENSITY_VALUE:
        return (1, 0, is_raw, "")
    return (0, dpi, is_raw, "")


def multi_abi_sort_key(multi_abi: MultiAbi) -> tuple[tuple[int, int, str], ...]:
    return tuple(abi_sort_key(abi) for abi in multi_abi.abi)


def _sdk_version_key(sdk_version: SdkVersion) -> int:
    return sdk_version.min


# --- Per-dimension normalizers ---


def normalize_abi_targeting(targeting: AbiTargeting) -> AbiTargeting:
    return AbiTargeting(
        value=_sorted_unique(targeting.value, abi_sort_key),
        alternatives=_sorted_unique(targeting.alternatives, abi_sort_key),
    )


def _normalize_multi_abi(multi_abi: MultiAbi) -> MultiAbi:
    return MultiAbi(abi=_sorted_unique(multi_abi.abi, abi_sort_key))


def normalize_multi_abi_targeting(targeting: MultiAbiTargeting) -> MultiAbiTargeting:
    return MultiAbiTargeting(
        value=_sorted_unique(
            (_normalize_multi_abi(m) for m in targeting.value), multi_abi_sort_key
        ),
        alternatives=_sorted_unique(
            (_normalize_multi_abi(m) for m in targeting.alternatives), multi_abi_sort_key
        ),
    )


def normalize_screen_density_targeting(
    targeting: ScreenDensityTargeting,
) -> ScreenDensityTargeting:
    return ScreenDensityTargeting(
        value=_sorted_unique(targeting.value, screen_density_sort_key),
        alternatives=_sorted_unique(targeting.alternatives, screen_density_sort_key),
    )


def normalize_language_targeting(targeting: LanguageTargeting) -> LanguageTargeting:
    return LanguageTargeting(
        value=_sorted_unique(targeting.value),
        alternatives=_sorted_unique(targeting.alternatives),
    )


def normalize_sdk_version_targeting(targeting: SdkVersionTargeting) -> SdkVersionTargeting:
    return SdkVersionTargeting(
        value=_sorted_unique(targeting.value, _sdk_version_key),
        alternatives=_sorted_unique(targeting.alternatives, _sdk_version_key),
    )


def normalize_texture_compression_format_targeting(
    targeting: TextureCompressionFormatTargeting,
) -> TextureCompressionFormatTargeting:
    return TextureCompressionFormatTargeting(
        value=_sorted_unique(targeting.value),
        alternatives=_sorted_unique(targeting.alternatives),
    )


def normalize_device_tier_targeting(targeting: DeviceTierTargeting) -> DeviceTierTargeting:
    return DeviceTierTargeting(
        value=_sorted_unique(targeting.value),
        alternatives=_sorted_unique(targeting.alternatives),
    )


def normalize_country_set_targeting(targeting: CountrySetTargeting) -> CountrySetTargeting:
    return CountrySetTargeting(
        value=_sorted_unique(targeting.value),
        alternatives=_sorted_unique(targeting.alternatives),
    )


def normalize_sdk_runtime_targeting(targeting: SdkRuntimeTargeting) -> SdkRuntimeTargeting:
    return SdkRuntimeTargeting(
        value=_sorted_unique(targeting.value),
        alternatives=_sorted_unique(targeting.alternatives),
    )


def normalize_sanitizer_targeting(targeting: SanitizerTargeting) -> SanitizerTargeting:
    return SanitizerTargeting(
        value=_sorted_unique(targeting.value, sanitizer_sort_key),
        alternatives=_sorted_unique(targeting.alternatives, sanitizer_sort_key),
    )


DIMENSION_NORMALIZERS: dict[TargetingDimension, Callable[[Any], Any]] = {
    TargetingDimension.abi: normalize_abi_targeting,
    TargetingDimension.multi_abi: normalize_multi_abi_targeting,
    TargetingDimension.screen_density: normalize_screen_density_targeting,
    TargetingDimension.language: normalize_language_targeting,
    TargetingDimension.sdk_version: normalize_sdk_version_targeting,
    TargetingDimension.texture_compression_format: normalize_texture_compression_format_targeting,
    TargetingDimension.device_tier: normalize_device_tier_targeting,
    TargetingDimension.country_set: normalize_country_set_targeting,
    TargetingDimension.sdk_runtime: normalize_sdk_runtime_targeting,
    TargetingDimension.sanitizer: normalize_sanitizer_targeting,
}


def normalize_dimension(
    dimension: TargetingDimension, targeting: DimensionTargeting
) -> DimensionTargeting:
    """Canonical form of a single dimension's targeting."""
    return DIMENSION_NORMALIZERS[dimension](targeting)


# --- Aggregates ---


def _normalize_aggregate(targeting: A) -> A:
    update = {
        dimension.value: normalize_dimension(dimension, targeting.get(dimension))
        for dimension in targeting.dimensions()
    }
    return targeting.model_copy(update=update)


def normalize_apk_targeting(targeting: ApkTargeting) -> ApkTargeting:
    return _normalize_aggregate(targeting)


def normalize_variant_targeting(targeting: VariantTargeting) -> VariantTargeting:
    return _normalize_aggregate(targeting)


def normalize_assets_directory_targeting(
    targeting: AssetsDirectoryTargeting,
) -> AssetsDirectoryTargeting:
    return _normalize_aggregate(targeting)


def normalize_assets(assets: Assets) -> Assets:
    """Normalize the targeting of every directory in ``assets``."""
    return Assets(
        directory=tuple(
            directory.model_copy(
                update={"targeting": normalize_assets_directory_targeting(directory.targeting)}
            )
            for directory in assets.directory
        )
    )


def _normalize_apk_description(apk: ApkDescription) -> ApkDescription:
    return apk.model_copy(update={"targeting": normalize_apk_targeting(apk.targeting)})


def normalize_variant(variant: Variant) -> Variant:
    """Normalize a variant's targeting and every APK targeting nested in it."""
    apk_sets = tuple(
        ApkSet(
            module_metadata=apk_set.module_metadata,
            apk_description=tuple(
                _normalize_apk_description(apk) for apk in apk_set.apk_description
            ),
        )
        for apk_set in variant.apk_set
    )
    return variant.model_copy(
        update={
            "targeting": normalize_variant_targeting(variant.targeting),
            "apk_set": apk_sets,
        }
    )
