"""DeviceMatcher: serves variants and APKs of a build result to one device."""

from __future__ import annotations

from typing import Any, Iterable

from ..config.runtime import TargetingSettings, get_settings
from ..domain import match_semantics as rules
from ..domain.dimensions import TargetingDimension
from ..domain.matchers import (
    TargetingDimensionMatcher,
    check_device_compatible,
    matcher_for,
    matches_apk_targeting,
    matches_variant_targeting,
)
from ..errors import InvalidTargetingError
from ..models.build_result import ApkDescription, BuildApksResult, Variant
from ..models.device import DeviceSpec
from ..models.targeting import AggregateTargeting, VariantTargeting, is_empty_targeting
from ..observability import configure_logging, log_match_decision

_RULES: dict[TargetingDimension, str] = {
    TargetingDimension.abi: rules.RULE_ABI_PREFERRED,
    TargetingDimension.multi_abi: rules.RULE_MULTI_ABI_BEST_SET,
    TargetingDimension.screen_density: rules.RULE_DENSITY_BEST_MATCH,
    TargetingDimension.language: rules.RULE_LANGUAGE_ANY_OR_FALLBACK,
    TargetingDimension.sdk_version: rules.RULE_SDK_VERSION_FLOOR,
    TargetingDimension.texture_compression_format: rules.RULE_TCF_PREFERRED,
    TargetingDimension.device_tier: rules.RULE_DEVICE_TIER_EXACT_OR_FALLBACK,
    TargetingDimension.country_set: rules.RULE_COUNTRY_SET_EXACT_OR_FALLBACK,
    TargetingDimension.sdk_runtime: rules.RULE_SDK_RUNTIME_CAPABILITY,
    TargetingDimension.sanitizer: rules.RULE_SANITIZER_EXACT_OR_PLAIN,
}


class DeviceMatcher:
    """Runs every dimension matcher of one device over targetings and variants."""

    def __init__(
        self,
        device: DeviceSpec,
        settings: TargetingSettings | None = None,
        logger: Any = None,
    ) -> None:
        self._device = device
        self._settings = settings or get_settings()
        self._logger = logger
        configure_logging(self._settings.log_level)
        self._matchers: dict[TargetingDimension, TargetingDimensionMatcher] = {
            dimension: matcher_for(
                dimension, device, strict_abis=self._settings.strict_device_abis
            )
            for dimension in TargetingDimension
        }

    @property
    def device(self) -> DeviceSpec:
        return self._device

    def matcher(self, dimension: TargetingDimension) -> TargetingDimensionMatcher:
        return self._matchers[dimension]

    # --- Aggregates ---

    def matches_apk(self, targeting: AggregateTargeting) -> bool:
        """True when every dimension of an APK or directory targeting matches."""
        return all(
            self._match(dimension, targeting, matches_apk_targeting)
            for dimension in targeting.dimensions()
        )

    def matches_variant(self, targeting: VariantTargeting) -> bool:
        """True when every dimension the device reports matches the variant targeting."""
        return all(
            self._match(dimension, targeting, matches_variant_targeting)
            for dimension in targeting.dimensions()
        )

    def check_compatible(self, targeting: AggregateTargeting) -> None:
        """Raise ``IncompatibleDeviceError`` if a reported device value is unaccounted for."""
        for dimension in targeting.dimensions():
            check_device_compatible(self._matchers[dimension], targeting.get(dimension))

    # --- Build results ---

    def matching_variants(self, result: BuildApksResult) -> tuple[Variant, ...]:
        """Variants served to the device, in table order.

        When nothing matches, every variant is checked for compatibility so a
        device the app cannot serve at all raises ``IncompatibleDeviceError``.
        """
        matched = tuple(v for v in result.variant if self.matches_variant(v.targeting))
        if not matched:
            for variant in result.variant:
                self.check_compatible(variant.targeting)
        if self._logger:
            self._logger.info(
                "variant_match",
                extra={
                    "package_name": result.package_name,
                    "variants": len(result.variant),
                    "matched_variants": [v.variant_number for v in matched],
                },
            )
        return matched

    def get_matching_variant(self, result: BuildApksResult) -> Variant | None:
        """The single variant to install, or None when nothing matches.

        Among matching variants, SDK-runtime variants win on devices supporting
        the runtime, then the highest SDK floor, then the highest variant number.
        """
        matched = self.matching_variants(result)
        if not matched:
            return None
        return max(matched, key=self._variant_rank)

    def matching_apks(
        self, variant: Variant, modules: Iterable[str] | None = None
    ) -> tuple[ApkDescription, ...]:
        """APKs of ``variant`` served to the device, optionally limited to ``modules``."""
        wanted = set(modules) if modules is not None else None
        return tuple(
            apk
            for apk_set in variant.apk_set
            if wanted is None or apk_set.module_metadata.name in wanted
            for apk in apk_set.apk_description
            if self.matches_apk(apk.targeting)
        )

    # --- Internals ---

    def _variant_rank(self, variant: Variant) -> tuple[int, int, int]:
        targeting = variant.targeting
        requires_runtime = bool(
            self._device.sdk_runtime_supported
            and targeting.sdk_runtime is not None
            and True in targeting.sdk_runtime.value
        )
        sdk_floor = 0
        if targeting.sdk_version is not None:
            sdk_floor = max((v.min for v in targeting.sdk_version.value), default=0)
        return (int(requires_runtime), sdk_floor, variant.variant_number)

    def _device_value(self, dimension: TargetingDimension) -> Any:
        device = self._device
        if dimension in (TargetingDimension.abi, TargetingDimension.multi_abi):
            return list(device.supported_abis)
        if dimension is TargetingDimension.language:
            return list(device.languages)
        if dimension is TargetingDimension.sdk_version:
            return device.effective_sdk_version
        if dimension is TargetingDimension.texture_compression_format:
            return sorted(device.texture_compression_formats)
        if dimension is TargetingDimension.sdk_runtime:
            return device.sdk_runtime_supported
        return getattr(device, dimension.value)

    def _match(self, dimension: TargetingDimension, targeting: AggregateTargeting, predicate) -> bool:
        try:
            matched = predicate(self._matchers[dimension], targeting)
        except InvalidTargetingError:
            self._record(dimension, False, rules.RULE_DISJOINT)
            raise
        if is_empty_targeting(targeting.get(dimension)):
            rule = rules.RULE_EMPTY_TARGETING_MATCHES
        else:
            rule = _RULES[dimension]
        self._record(dimension, matched, rule)
        return matched

    def _record(self, dimension: TargetingDimension, matched: bool, rule: str) -> None:
        if self._settings.log_decisions:
            log_match_decision(
                dimension.value,
                matched,
                device_value=self._device_value(dimension),
                rule=rule,
            )
