"""Per-dimension matchers of targeting against a device.

Every matcher implements ``TargetingDimensionMatcher``:

- ``is_device_dimension_present``: the device reports a value for the dimension.
- ``get_targeting_value``: projects the dimension out of an aggregate targeting.
- ``matches_targeting``: serving-time selection predicate. Rejects targeting
  whose values and alternatives overlap.
- ``check_device_compatible_internal``: the device value is accounted for by
  values or alternatives; raises ``IncompatibleDeviceError`` otherwise.

Matchers are independent frozen dataclasses selected through ``MATCHERS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Protocol, runtime_checkable

from ..errors import DimensionNotPresentError, IncompatibleDeviceError, InvalidTargetingError
from ..models.device import DeviceSpec
from ..models.targeting import (
    AbiTargeting,
    AggregateTargeting,
    CountrySetTargeting,
    DeviceTierTargeting,
    DimensionTargeting,
    LanguageTargeting,
    MultiAbi,
    MultiAbiTargeting,
    SanitizerTargeting,
    ScreenDensity,
    ScreenDensityTargeting,
    SdkRuntimeTargeting,
    SdkVersion,
    SdkVersionTargeting,
    TextureCompressionFormatTargeting,
    VariantTargeting,
    is_empty_targeting,
)
from .density_selector import select_best_density
from .dimensions import (
    NO_SANITIZER,
    TargetingDimension,
    abi_preference,
    density_alias_dpi,
    is_known_abi,
    texture_compression_format_preference,
)


@runtime_checkable
class TargetingDimensionMatcher(Protocol):
    """Capabilities shared by every dimension matcher."""

    dimension: TargetingDimension
    device: DeviceSpec

    def is_device_dimension_present(self) -> bool: ...

    def get_targeting_value(self, targeting: AggregateTargeting) -> Any: ...

    def matches_targeting(self, targeting: Any) -> bool: ...

    def check_device_compatible_internal(self, targeting: Any) -> None: ...


# --- Shared helpers ---


def _describe(value: Any) -> str:
    if isinstance(value, ScreenDensity):
        return value.density_alias if value.density_alias is not None else str(value.density_dpi)
    if isinstance(value, SdkVersion):
        return str(value.min)
    if isinstance(value, MultiAbi):
        return "[" + ", ".join(value.abi) + "]"
    if isinstance(value, frozenset):
        return "[" + ", ".join(sorted(value)) + "]"
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _describe_all(values: Iterable[Any]) -> str:
    return "[" + ", ".join(sorted(_describe(v) for v in values)) + "]"


def project(targeting: AggregateTargeting, dimension: TargetingDimension) -> DimensionTargeting:
    """Return ``dimension``'s targeting; raise if the aggregate does not carry it."""
    value = targeting.get(dimension)
    if value is None:
        raise DimensionNotPresentError(dimension.value, type(targeting).__name__)
    return value


def check_disjoint(
    dimension: TargetingDimension, values: Iterable[Any], alternatives: Iterable[Any]
) -> None:
    overlap = set(values) & set(alternatives)
    if overlap:
        raise InvalidTargetingError(
            "Expected targeting values and alternatives to be mutually exclusive, "
            f"but both contain: {_describe_all(overlap)}",
            dimension=dimension,
            values=overlap,
        )


def _device_abis(device: DeviceSpec, strict: bool, dimension: TargetingDimension) -> tuple[str, ...]:
    abis: list[str] = []
    for abi in device.supported_abis:
        if is_known_abi(abi):
            abis.append(abi)
        elif strict:
            raise IncompatibleDeviceError(
                f"Unrecognized ABI '{abi}' in device spec.", dimension=dimension, values=[abi]
            )
    return tuple(abis)


# --- ABI ---


@dataclass(frozen=True)
class AbiMatcher:
    """Matches the device's most preferred ABI among values and alternatives."""

    device: DeviceSpec
    strict: bool = True
    dimension: ClassVar[TargetingDimension] = TargetingDimension.abi

    def is_device_dimension_present(self) -> bool:
        return bool(self.device.supported_abis)

    def get_targeting_value(self, targeting: AggregateTargeting) -> AbiTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: AbiTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(self.dimension, targeting.value, targeting.alternatives)
        # Device ABIs are in order of preference; the first one claimed decides.
        for abi in _device_abis(self.device, self.strict, self.dimension):
            if abi in targeting.value:
                return True
            if abi in targeting.alternatives:
                return False
        # Fallback for the ABIs listed as alternatives.
        return not targeting.value

    def check_device_compatible_internal(self, targeting: AbiTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        app_abis = set(targeting.value) | set(targeting.alternatives)
        device_abis = _device_abis(self.device, self.strict, self.dimension)
        if not app_abis.intersection(device_abis):
            raise IncompatibleDeviceError(
                "The app doesn't support ABI architectures of the device. "
                f"Device ABIs: {list(self.device.supported_abis)}, "
                f"app ABIs: {_describe_all(app_abis)}.",
                dimension=self.dimension,
                values=self.device.supported_abis,
            )


# --- Multi ABI ---


def _multi_abi_preference(abis: frozenset[str]) -> tuple[int, ...]:
    """Sets compare by their most preferred differing ABI; a superset beats its subset."""
    return tuple(sorted((abi_preference(abi) for abi in abis), reverse=True))


@dataclass(frozen=True)
class MultiAbiMatcher:
    """Matches the most preferable ABI set fully supported by the device."""

    device: DeviceSpec
    strict: bool = True
    dimension: ClassVar[TargetingDimension] = TargetingDimension.multi_abi

    def is_device_dimension_present(self) -> bool:
        return bool(self.device.supported_abis)

    def get_targeting_value(self, targeting: AggregateTargeting) -> MultiAbiTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: MultiAbiTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        values = {frozenset(m.abi) for m in targeting.value}
        alternatives = {frozenset(m.abi) for m in targeting.alternatives}
        check_disjoint(self.dimension, values, alternatives)
        device_abis = set(_device_abis(self.device, self.strict, self.dimension))

        if not any(value <= device_abis for value in values):
            return False
        return not any(
            alternative <= device_abis
            and all(
                _multi_abi_preference(alternative) > _multi_abi_preference(value)
                for value in values
            )
            for alternative in alternatives
        )

    def check_device_compatible_internal(self, targeting: MultiAbiTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        app_sets = {frozenset(m.abi) for m in (*targeting.value, *targeting.alternatives)}
        device_abis = set(_device_abis(self.device, self.strict, self.dimension))
        if not any(abi_set <= device_abis for abi_set in app_sets):
            raise IncompatibleDeviceError(
                "No set of ABI architectures that the app supports is contained in the ABI "
                f"architecture set of the device. Device ABIs: {list(self.device.supported_abis)}, "
                f"app ABIs: {_describe_all(app_sets)}.",
                dimension=self.dimension,
                values=self.device.supported_abis,
            )


# --- Screen density ---


def _density_key(density: ScreenDensity) -> int | str:
    if density.density_alias is not None:
        dpi = density_alias_dpi(density.density_alias)
        return dpi if dpi is not None else density.density_alias
    return density.density_dpi


def _resolvable_dpis(densities: Iterable[ScreenDensity]) -> set[int]:
    return {key for key in map(_density_key, densities) if isinstance(key, int)}


@dataclass(frozen=True)
class ScreenDensityMatcher:
    """Matches when a value is the best density for the device among all siblings."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.screen_density

    def is_device_dimension_present(self) -> bool:
        return self.device.screen_density != 0

    def get_targeting_value(self, targeting: AggregateTargeting) -> ScreenDensityTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: ScreenDensityTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(
            self.dimension,
            map(_density_key, targeting.value),
            map(_density_key, targeting.alternatives),
        )
        value_dpis = _resolvable_dpis(targeting.value)
        if not value_dpis:
            return False
        candidates = value_dpis | _resolvable_dpis(targeting.alternatives)
        return select_best_density(candidates, self.device.screen_density) in value_dpis

    def check_device_compatible_internal(self, targeting: ScreenDensityTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        # Any resolvable density can be scaled for the device.
        if not _resolvable_dpis((*targeting.value, *targeting.alternatives)):
            raise IncompatibleDeviceError(
                f"None of the app screen densities "
                f"{_describe_all((*targeting.value, *targeting.alternatives))} "
                f"can be served to the device density ({self.device.screen_density}).",
                dimension=self.dimension,
                values=[self.device.screen_density],
            )


# --- Language ---


@dataclass(frozen=True)
class LanguageMatcher:
    """Matches any device language; a fallback split matches uncovered languages."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.language

    def is_device_dimension_present(self) -> bool:
        return bool(self.device.supported_locales)

    def get_targeting_value(self, targeting: AggregateTargeting) -> LanguageTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: LanguageTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(self.dimension, targeting.value, targeting.alternatives)
        languages = self.device.languages
        if targeting.value:
            return any(language in targeting.value for language in languages)
        return any(language not in targeting.alternatives for language in languages)

    def check_device_compatible_internal(self, targeting: LanguageTargeting) -> None:
        if is_empty_targeting(targeting) or not targeting.value:
            return
        app_languages = set(targeting.value) | set(targeting.alternatives)
        if not app_languages.intersection(self.device.languages):
            raise IncompatibleDeviceError(
                "The app doesn't support any of the device languages. "
                f"Device languages: {list(self.device.languages)}, "
                f"app languages: {_describe_all(app_languages)}.",
                dimension=self.dimension,
                values=self.device.languages,
            )


# --- SDK version ---


@dataclass(frozen=True)
class SdkVersionMatcher:
    """Matches the highest floor the device satisfies, unless an alternative beats it."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.sdk_version

    def is_device_dimension_present(self) -> bool:
        return self.device.sdk_version != 0

    def get_targeting_value(self, targeting: AggregateTargeting) -> SdkVersionTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: SdkVersionTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(
            self.dimension,
            (v.min for v in targeting.value),
            (v.min for v in targeting.alternatives),
        )
        device_sdk = self.device.effective_sdk_version
        satisfied = [v.min for v in targeting.value if v.min <= device_sdk]
        if not satisfied:
            return False
        best = max(satisfied)
        return not any(best < alt.min <= device_sdk for alt in targeting.alternatives)

    def check_device_compatible_internal(self, targeting: SdkVersionTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        device_sdk = self.device.effective_sdk_version
        if not any(v.min <= device_sdk for v in (*targeting.value, *targeting.alternatives)):
            raise IncompatibleDeviceError(
                f"SDK version ({self.device.sdk_version}) of the device is not supported.",
                dimension=self.dimension,
                values=[self.device.sdk_version],
            )


# --- Texture compression format ---


@dataclass(frozen=True)
class TextureCompressionFormatMatcher:
    """Matches the most preferred format the device supports."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.texture_compression_format

    def is_device_dimension_present(self) -> bool:
        return bool(self.device.texture_compression_formats)

    def get_targeting_value(
        self, targeting: AggregateTargeting
    ) -> TextureCompressionFormatTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: TextureCompressionFormatTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(self.dimension, targeting.value, targeting.alternatives)
        preferred_first = sorted(
            self.device.texture_compression_formats,
            key=lambda tcf: (texture_compression_format_preference(tcf), tcf),
            reverse=True,
        )
        for tcf in preferred_first:
            if tcf in targeting.value:
                return True
            if tcf in targeting.alternatives:
                # A better alternative exists.
                return False
        # Fallback for the formats listed as alternatives.
        return not targeting.value and bool(targeting.alternatives)

    def check_device_compatible_internal(
        self, targeting: TextureCompressionFormatTargeting
    ) -> None:
        if is_empty_targeting(targeting) or not targeting.value:
            return
        app_formats = set(targeting.value) | set(targeting.alternatives)
        device_formats = self.device.texture_compression_formats
        if not app_formats & device_formats:
            raise IncompatibleDeviceError(
                "The app doesn't support texture compression formats of the device. "
                f"Device formats: {_describe_all(device_formats)}, "
                f"app formats: {_describe_all(app_formats)}.",
                dimension=self.dimension,
                values=device_formats,
            )


# --- Device tier ---


@dataclass(frozen=True)
class DeviceTierMatcher:
    """Matches when the device tier is one of the values."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.device_tier

    def is_device_dimension_present(self) -> bool:
        return self.device.device_tier is not None

    def get_targeting_value(self, targeting: AggregateTargeting) -> DeviceTierTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: DeviceTierTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(self.dimension, targeting.value, targeting.alternatives)
        if self.device.device_tier is None:
            return not targeting.value
        return self.device.device_tier in targeting.value

    def check_device_compatible_internal(self, targeting: DeviceTierTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        tier = self.device.device_tier
        if tier not in targeting.value and tier not in targeting.alternatives:
            raise IncompatibleDeviceError(
                f"The specified device tier '{tier}' does not match any of the available "
                f"values: {', '.join((*targeting.value, *targeting.alternatives))}.",
                dimension=self.dimension,
                values=[tier],
            )


# --- Country set ---


@dataclass(frozen=True)
class CountrySetMatcher:
    """Matches when the device country set is one of the values."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.country_set

    def is_device_dimension_present(self) -> bool:
        return self.device.country_set is not None

    def get_targeting_value(self, targeting: AggregateTargeting) -> CountrySetTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: CountrySetTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(self.dimension, targeting.value, targeting.alternatives)
        if self.device.country_set is None:
            return not targeting.value
        return self.device.country_set in targeting.value

    def check_device_compatible_internal(self, targeting: CountrySetTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        country_set = self.device.country_set
        if country_set not in targeting.value and country_set not in targeting.alternatives:
            raise IncompatibleDeviceError(
                f"The specified country set '{country_set}' does not match any of the available "
                f"values: {', '.join((*targeting.value, *targeting.alternatives))}.",
                dimension=self.dimension,
                values=[country_set],
            )


# --- SDK runtime ---


@dataclass(frozen=True)
class SdkRuntimeMatcher:
    """Runtime-enabled targeting needs device support; the rest matches every device."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.sdk_runtime

    def is_device_dimension_present(self) -> bool:
        return self.device.sdk_runtime_supported is not None

    def get_targeting_value(self, targeting: AggregateTargeting) -> SdkRuntimeTargeting:
        return project(targeting, self.dimension)

    def _satisfies(self, requires_sdk_runtime: bool) -> bool:
        return not requires_sdk_runtime or bool(self.device.sdk_runtime_supported)

    def matches_targeting(self, targeting: SdkRuntimeTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(self.dimension, targeting.value, targeting.alternatives)
        return any(self._satisfies(requires) for requires in targeting.value)

    def check_device_compatible_internal(self, targeting: SdkRuntimeTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        if not any(self._satisfies(r) for r in (*targeting.value, *targeting.alternatives)):
            raise IncompatibleDeviceError(
                "The device does not support the SDK runtime required by the app.",
                dimension=self.dimension,
                values=[self.device.sdk_runtime_supported],
            )


# --- Sanitizer ---


@dataclass(frozen=True)
class SanitizerMatcher:
    """Sanitized native code is served to devices built with that sanitizer only."""

    device: DeviceSpec
    dimension: ClassVar[TargetingDimension] = TargetingDimension.sanitizer

    def is_device_dimension_present(self) -> bool:
        return self.device.sanitizer is not None

    def get_targeting_value(self, targeting: AggregateTargeting) -> SanitizerTargeting:
        return project(targeting, self.dimension)

    def matches_targeting(self, targeting: SanitizerTargeting) -> bool:
        if is_empty_targeting(targeting):
            return True
        check_disjoint(self.dimension, targeting.value, targeting.alternatives)
        sanitizer = self.device.sanitizer
        if sanitizer is None:
            return not targeting.value or NO_SANITIZER in targeting.value
        return sanitizer in targeting.value

    def check_device_compatible_internal(self, targeting: SanitizerTargeting) -> None:
        if is_empty_targeting(targeting):
            return
        sanitizer = self.device.sanitizer
        if sanitizer not in targeting.value and sanitizer not in targeting.alternatives:
            raise IncompatibleDeviceError(
                f"The device sanitizer '{sanitizer}' does not match any of the available "
                f"values: {', '.join((*targeting.value, *targeting.alternatives))}.",
                dimension=self.dimension,
                values=[sanitizer],
            )


# --- Registry ---

MATCHERS: dict[TargetingDimension, type] = {
    TargetingDimension.abi: AbiMatcher,
    TargetingDimension.multi_abi: MultiAbiMatcher,
    TargetingDimension.screen_density: ScreenDensityMatcher,
    TargetingDimension.language: LanguageMatcher,
    TargetingDimension.sdk_version: SdkVersionMatcher,
    TargetingDimension.texture_compression_format: TextureCompressionFormatMatcher,
    TargetingDimension.device_tier: DeviceTierMatcher,
    TargetingDimension.country_set: CountrySetMatcher,
    TargetingDimension.sdk_runtime: SdkRuntimeMatcher,
    TargetingDimension.sanitizer: SanitizerMatcher,
}

_ABI_DIMENSIONS = frozenset({TargetingDimension.abi, TargetingDimension.multi_abi})


def matcher_for(
    dimension: TargetingDimension, device: DeviceSpec, *, strict_abis: bool = True
) -> TargetingDimensionMatcher:
    """Build the matcher of ``dimension`` for ``device``."""
    matcher_type = MATCHERS[dimension]
    if dimension in _ABI_DIMENSIONS:
        return matcher_type(device, strict=strict_abis)
    return matcher_type(device)


def check_device_compatible(matcher: TargetingDimensionMatcher, targeting: Any) -> None:
    """Run the compatibility check only when the device reports the dimension."""
    if matcher.is_device_dimension_present():
        matcher.check_device_compatible_internal(targeting)


def matches_apk_targeting(matcher: TargetingDimensionMatcher, targeting: AggregateTargeting) -> bool:
    """APK predicate; an aggregate that does not carry the dimension always matches."""
    if not targeting.has(matcher.dimension):
        return True
    return matcher.matches_targeting(matcher.get_targeting_value(targeting))


def matches_variant_targeting(matcher: TargetingDimensionMatcher, targeting: VariantTargeting) -> bool:
    """Variant predicate; a device without the dimension matches any targeting of it."""
    if not targeting.has(matcher.dimension) or not matcher.is_device_dimension_present():
        return True
    return matcher.matches_targeting(matcher.get_targeting_value(targeting))
