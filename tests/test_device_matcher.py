"""DeviceMatcher tests: variant and APK selection for one device."""

import logging

import pytest

from apktargeting.config.runtime import TargetingSettings
from apktargeting.domain.dimensions import TargetingDimension
from apktargeting.domain.match_semantics import RULE_DISJOINT, RULE_EMPTY_TARGETING_MATCHES, RULE_LANGUAGE_ANY_OR_FALLBACK
from apktargeting.errors import IncompatibleDeviceError, InvalidTargetingError
from apktargeting.models.build_result import (
    ApkDescription,
    ApkSet,
    BuildApksResult,
    ModuleMetadata,
    SplitApkMetadata,
    StandaloneApkMetadata,
    Variant,
)
from apktargeting.models.device import DeviceSpec
from apktargeting.models.targeting import (
    AbiTargeting,
    ApkTargeting,
    LanguageTargeting,
    MultiAbi,
    MultiAbiTargeting,
    ScreenDensity,
    ScreenDensityTargeting,
    SdkRuntimeTargeting,
    SdkVersion,
    SdkVersionTargeting,
    VariantTargeting,
)
from apktargeting.observability import metrics_snapshot, reset_metrics
from apktargeting.services.device_matcher import DeviceMatcher

_SETTINGS = TargetingSettings(strict_device_abis=True, log_decisions=False)


def _sdk(value: int, *alternatives: int) -> SdkVersionTargeting:
    return SdkVersionTargeting(
        value=(SdkVersion(min=value),), alternatives=tuple(SdkVersion(min=a) for a in alternatives)
    )


def _density(value: str, *alternatives: str) -> ScreenDensityTargeting:
    return ScreenDensityTargeting(
        value=(ScreenDensity(density_alias=value),),
        alternatives=tuple(ScreenDensity(density_alias=a) for a in alternatives),
    )


def _split(path: str, targeting: ApkTargeting | None = None, master: bool = False) -> ApkDescription:
    return ApkDescription(
        path=path,
        targeting=targeting or ApkTargeting(),
        split_apk_metadata=SplitApkMetadata(split_id="" if master else path, is_master_split=master),
    )


def _standalone(number: int, abi: str, alt_abi: str, density: str, alt_density: str) -> Variant:
    apk_targeting = ApkTargeting(
        abi=AbiTargeting(value=(abi,), alternatives=(alt_abi,)),
        screen_density=_density(density, alt_density),
    )
    return Variant(
        variant_number=number,
        targeting=VariantTargeting(
            sdk_version=_sdk(1, 21),
            abi=apk_targeting.abi,
            screen_density=apk_targeting.screen_density,
        ),
        apk_set=(
            ApkSet(
                module_metadata=ModuleMetadata(name="base"),
                apk_description=(
                    ApkDescription(
                        path=f"standalone-{abi}.{density.lower()}.apk",
                        targeting=apk_targeting,
                        standalone_apk_metadata=StandaloneApkMetadata(fused_module_name=("base",)),
                    ),
                ),
            ),
        ),
    )


def _split_variant(number: int = 1) -> Variant:
    return Variant(
        variant_number=number,
        targeting=VariantTargeting(sdk_version=_sdk(21, 1)),
        apk_set=(
            ApkSet(
                module_metadata=ModuleMetadata(name="base"),
                apk_description=(
                    _split("base-master.apk", master=True),
                    _split("base-x86.apk", ApkTargeting(abi=AbiTargeting(value=("x86",), alternatives=("armeabi",)))),
                    _split("base-armeabi.apk", ApkTargeting(abi=AbiTargeting(value=("armeabi",), alternatives=("x86",)))),
                    _split("base-en.apk", ApkTargeting(language=LanguageTargeting(value=("en",)))),
                    _split("base-fr.apk", ApkTargeting(language=LanguageTargeting(value=("fr",)))),
                ),
            ),
            ApkSet(
                module_metadata=ModuleMetadata(name="screen"),
                apk_description=(
                    _split("screen-xxxhdpi.apk", ApkTargeting(screen_density=_density("XXXHDPI", "MDPI"))),
                    _split("screen-mdpi.apk", ApkTargeting(screen_density=_density("MDPI", "XXXHDPI"))),
                ),
            ),
        ),
    )


STANDALONE_X86_MDPI = _standalone(0, "x86", "armeabi", "MDPI", "XXXHDPI")
SPLITS = _split_variant()
RESULT = BuildApksResult(package_name="com.example.app", variant=(STANDALONE_X86_MDPI, SPLITS))


class TestMatchingVariants:
    """Variant selection across the build result."""

    def test_empty_device_matches_all_variants(self):
        assert DeviceMatcher(DeviceSpec(), _SETTINGS).matching_variants(RESULT) == RESULT.variant

    def test_pre_l_device_gets_standalone(self):
        device = DeviceSpec(sdk_version=19, supported_abis=("x86",), screen_density=160, supported_locales=("en",))
        assert DeviceMatcher(device, _SETTINGS).matching_variants(RESULT) == (STANDALONE_X86_MDPI,)

    def test_pre_l_device_with_better_density_alternative_gets_nothing(self):
        device = DeviceSpec(sdk_version=19, supported_abis=("x86",), screen_density=240)
        assert DeviceMatcher(device, _SETTINGS).matching_variants(RESULT) == ()

    def test_post_l_device_gets_splits(self):
        assert DeviceMatcher(DeviceSpec(sdk_version=21), _SETTINGS).matching_variants(RESULT) == (SPLITS,)

    def test_unservable_device_raises(self):
        x86 = MultiAbi(abi=("x86",))
        x64_x86 = MultiAbi(abi=("x86_64", "x86"))
        result = BuildApksResult(
            variant=(
                Variant(variant_number=0, targeting=VariantTargeting(multi_abi=MultiAbiTargeting(value=(x86,), alternatives=(x64_x86,)))),
                Variant(variant_number=1, targeting=VariantTargeting(multi_abi=MultiAbiTargeting(value=(x64_x86,), alternatives=(x86,)))),
            )
        )
        matcher = DeviceMatcher(DeviceSpec(supported_abis=("x86_64", "armeabi-v7a")), _SETTINGS)
        with pytest.raises(IncompatibleDeviceError, match="No set of ABI architectures"):
            matcher.matching_variants(result)


class TestGetMatchingVariant:
    """Single variant choice: SDK runtime first, then best SDK floor."""

    RUNTIME = Variant(
        variant_number=1,
        targeting=VariantTargeting(sdk_version=_sdk(33), sdk_runtime=SdkRuntimeTargeting(value=(True,))),
    )
    PLAIN = Variant(variant_number=0, targeting=VariantTargeting(sdk_version=_sdk(21)))
    RESULT = BuildApksResult(variant=(RUNTIME, PLAIN))

    def test_runtime_variant_for_supporting_device(self):
        device = DeviceSpec(sdk_version=33, sdk_runtime_supported=True)
        assert DeviceMatcher(device, _SETTINGS).get_matching_variant(self.RESULT) == self.RUNTIME

    def test_plain_variant_for_older_device(self):
        device = DeviceSpec(sdk_version=21)
        assert DeviceMatcher(device, _SETTINGS).get_matching_variant(self.RESULT) == self.PLAIN

    def test_best_sdk_floor(self):
        older = Variant(variant_number=0, targeting=VariantTargeting(sdk_version=_sdk(33, 34)))
        newer = Variant(variant_number=1, targeting=VariantTargeting(sdk_version=_sdk(34, 33)))
        device = DeviceSpec(sdk_version=34)
        result = BuildApksResult(variant=(older, newer))
        assert DeviceMatcher(device, _SETTINGS).get_matching_variant(result) == newer

    def test_no_match_returns_none(self):
        result = BuildApksResult(variant=(Variant(targeting=VariantTargeting(sdk_version=_sdk(21, 1))),))
        assert DeviceMatcher(DeviceSpec(sdk_version=19), _SETTINGS).get_matching_variant(result) is None


class TestMatchingApks:
    """APK selection within a variant."""

    DEVICE = DeviceSpec(sdk_version=30, supported_abis=("x86",), screen_density=640, supported_locales=("fr-FR",))

    def test_apks_for_device(self):
        paths = [apk.path for apk in DeviceMatcher(self.DEVICE, _SETTINGS).matching_apks(SPLITS)]
        assert paths == ["base-master.apk", "base-x86.apk", "base-fr.apk", "screen-xxxhdpi.apk"]

    def test_module_filter(self):
        apks = DeviceMatcher(self.DEVICE, _SETTINGS).matching_apks(SPLITS, modules=["screen"])
        assert [apk.path for apk in apks] == ["screen-xxxhdpi.apk"]

    def test_check_compatible(self):
        matcher = DeviceMatcher(DeviceSpec(supported_abis=("mips",)), _SETTINGS)
        with pytest.raises(IncompatibleDeviceError):
            matcher.check_compatible(ApkTargeting(abi=AbiTargeting(value=("x86",), alternatives=("armeabi",))))

    def test_lenient_abis_from_settings(self):
        settings = TargetingSettings(strict_device_abis=False)
        matcher = DeviceMatcher(DeviceSpec(supported_abis=("sparc", "x86")), settings)
        assert matcher.matches_apk(ApkTargeting(abi=AbiTargeting(value=("x86",)))) is True
        assert matcher.matcher(TargetingDimension.abi).strict is False


class TestAbiPreference:
    """A multi-ABI device is served its most preferred ABI only."""

    DEVICE = DeviceSpec(sdk_version=30, supported_abis=("arm64-v8a", "armeabi-v7a"))

    @staticmethod
    def _abi_variant(number: int, abi: str, alternative: str) -> Variant:
        targeting = AbiTargeting(value=(abi,), alternatives=(alternative,))
        return Variant(
            variant_number=number,
            targeting=VariantTargeting(abi=targeting),
            apk_set=(
                ApkSet(
                    module_metadata=ModuleMetadata(name="base"),
                    apk_description=(
                        ApkDescription(
                            path=f"standalone-{abi}.apk",
                            targeting=ApkTargeting(abi=targeting),
                            standalone_apk_metadata=StandaloneApkMetadata(fused_module_name=("base",)),
                        ),
                    ),
                ),
            ),
        )

    def test_variant_for_preferred_abi(self):
        arm64 = self._abi_variant(1, "arm64-v8a", "armeabi-v7a")
        v7a = self._abi_variant(2, "armeabi-v7a", "arm64-v8a")
        result = BuildApksResult(variant=(arm64, v7a))
        matcher = DeviceMatcher(self.DEVICE, _SETTINGS)
        assert matcher.matching_variants(result) == (arm64,)
        assert matcher.get_matching_variant(result) == arm64

    def test_split_for_preferred_abi(self):
        variant = Variant(
            variant_number=1,
            apk_set=(
                ApkSet(
                    module_metadata=ModuleMetadata(name="base"),
                    apk_description=(
                        _split("base-master.apk", master=True),
                        _split("base-armeabi_v7a.apk", ApkTargeting(abi=AbiTargeting(value=("armeabi-v7a",), alternatives=("arm64-v8a",)))),
                        _split("base-arm64_v8a.apk", ApkTargeting(abi=AbiTargeting(value=("arm64-v8a",), alternatives=("armeabi-v7a",)))),
                    ),
                ),
            ),
        )
        paths = [apk.path for apk in DeviceMatcher(self.DEVICE, _SETTINGS).matching_apks(variant)]
        assert paths == ["base-master.apk", "base-arm64_v8a.apk"]


class TestDecisionLogging:
    """Decisions are logged and counted only when enabled."""

    def test_decisions_logged_when_enabled(self, caplog):
        reset_metrics()
        settings = TargetingSettings(log_decisions=True)
        matcher = DeviceMatcher(DeviceSpec(supported_locales=("en",)), settings)
        with caplog.at_level(logging.INFO, logger="apktargeting"):
            assert matcher.matches_apk(ApkTargeting(language=LanguageTargeting(value=("fr",)))) is False
        records = [r for r in caplog.records if r.getMessage() == "match_decision"]
        assert len(records) == 1
        assert records[0].dimension == "language"
        assert records[0].matched is False
        assert records[0].device_value == ["en"]
        assert records[0].rule == RULE_LANGUAGE_ANY_OR_FALLBACK
        assert metrics_snapshot() == {"decisions": {"language": 1}, "rejections": {"language": 1}}

    def test_nothing_logged_by_default(self, caplog):
        reset_metrics()
        matcher = DeviceMatcher(DeviceSpec(supported_locales=("en",)), _SETTINGS)
        with caplog.at_level(logging.INFO, logger="apktargeting"):
            matcher.matches_apk(ApkTargeting(language=LanguageTargeting(value=("en",))))
        assert not [r for r in caplog.records if r.getMessage() == "match_decision"]
        assert metrics_snapshot() == {"decisions": {}, "rejections": {}}

    def test_service_logger_receives_variant_summary(self, caplog):
        logger = logging.getLogger("apktargeting.test")
        matcher = DeviceMatcher(DeviceSpec(sdk_version=21), _SETTINGS, logger=logger)
        with caplog.at_level(logging.INFO, logger="apktargeting.test"):
            matcher.matching_variants(RESULT)
        summary = [r for r in caplog.records if r.getMessage() == "variant_match"]
        assert summary[0].matched_variants == [1]

    def test_empty_targeting_and_overlap_rules_logged(self, caplog):
        reset_metrics()
        matcher = DeviceMatcher(DeviceSpec(supported_locales=("en",)), TargetingSettings(log_decisions=True))
        overlapping = ApkTargeting(language=LanguageTargeting(value=("en",), alternatives=("en",)))
        with caplog.at_level(logging.INFO, logger="apktargeting"):
            assert matcher.matches_apk(ApkTargeting(language=LanguageTargeting())) is True
            with pytest.raises(InvalidTargetingError):
                matcher.matches_apk(overlapping)
        rules = [r.rule for r in caplog.records if r.getMessage() == "match_decision"]
        assert rules == [RULE_EMPTY_TARGETING_MATCHES, RULE_DISJOINT]
        assert metrics_snapshot()["rejections"] == {"language": 1}
