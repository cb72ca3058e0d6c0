"""Tests that lock match semantics and prevent drift.

These tests encode the rules from domain.match_semantics as executable assertions.
"""

from apktargeting.domain.dimensions import TargetingDimension
from apktargeting.domain.match_semantics import (
    RULE_ABI_PREFERRED,
    RULE_COUNTRY_SET_EXACT_OR_FALLBACK,
    RULE_DEVICE_TIER_EXACT_OR_FALLBACK,
    RULE_DISJOINT,
    RULE_EMPTY_TARGETING_MATCHES,
    RULE_SDK_RUNTIME_CAPABILITY,
    RULE_SDK_VERSION_FLOOR,
)
from apktargeting.domain.matchers import MATCHERS, matcher_for
from apktargeting.models.device import DeviceSpec
from apktargeting.models.targeting import (
    DIMENSION_TARGETING_TYPES,
    AbiTargeting,
    CountrySetTargeting,
    DeviceTierTargeting,
    SdkRuntimeTargeting,
    SdkVersion,
    SdkVersionTargeting,
)

_FULL_DEVICE = DeviceSpec(
    supported_abis=("arm64-v8a",),
    supported_locales=("en-US",),
    screen_density=480,
    sdk_version=30,
    supported_texture_compression_formats=("astc",),
    device_tier="high",
    country_set="sea",
    sdk_runtime_supported=True,
    sanitizer="hwaddress",
)


class TestEmptyTargetingSemantics:
    """Empty targeting: matches every device on every dimension."""

    def test_empty_targeting_matches_everywhere(self):
        for dimension in MATCHERS:
            matcher = matcher_for(dimension, _FULL_DEVICE)
            empty = DIMENSION_TARGETING_TYPES[dimension]()
            assert matcher.matches_targeting(empty) is True
            matcher.check_device_compatible_internal(empty)
        assert "every device" in RULE_EMPTY_TARGETING_MATCHES
        assert "mutually exclusive" in RULE_DISJOINT


class TestAbiSemantics:
    """ABI: device preference order decides between siblings."""

    def test_first_claimed_device_abi_decides(self):
        matcher = matcher_for(TargetingDimension.abi, DeviceSpec(supported_abis=("x86_64", "x86")))
        assert matcher.matches_targeting(AbiTargeting(value=("x86", "mips"))) is True
        assert matcher.matches_targeting(AbiTargeting(value=("x86",), alternatives=("x86_64",))) is False
        assert matcher.matches_targeting(AbiTargeting(value=("mips",))) is False
        assert "preference order" in RULE_ABI_PREFERRED


class TestSdkVersionSemantics:
    """SDK version: floor, not equality."""

    def test_floor_below_device_matches(self):
        matcher = matcher_for(TargetingDimension.sdk_version, DeviceSpec(sdk_version=30))
        assert matcher.matches_targeting(SdkVersionTargeting(value=(SdkVersion(min=24),))) is True
        assert "floor" in RULE_SDK_VERSION_FLOOR


class TestTierAndCountrySemantics:
    """Tier and country set: exact value, or fallback for devices without one."""

    def test_exact_or_fallback(self):
        tier = matcher_for(TargetingDimension.device_tier, DeviceSpec())
        country = matcher_for(TargetingDimension.country_set, DeviceSpec())
        assert tier.matches_targeting(DeviceTierTargeting(alternatives=("high",))) is True
        assert country.matches_targeting(CountrySetTargeting(alternatives=("sea",))) is True
        assert "equals a value" in RULE_DEVICE_TIER_EXACT_OR_FALLBACK
        assert "equals a value" in RULE_COUNTRY_SET_EXACT_OR_FALLBACK


class TestSdkRuntimeSemantics:
    """SDK runtime: capability check."""

    def test_not_requiring_matches_all(self):
        for supported in (True, False):
            matcher = matcher_for(TargetingDimension.sdk_runtime, DeviceSpec(sdk_runtime_supported=supported))
            assert matcher.matches_targeting(SdkRuntimeTargeting(value=(False,))) is True
        assert "not requiring matches all" in RULE_SDK_RUNTIME_CAPABILITY
