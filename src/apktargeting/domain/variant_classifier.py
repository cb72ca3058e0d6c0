"""Classification of generated variants by the kind of APKs they carry."""

from __future__ import annotations

from typing import Callable, Iterable, Union

from ..models.build_result import BASE_MODULE_NAME, ApkDescription, BuildApksResult, Variant

VariantTable = Union[BuildApksResult, Iterable[Variant]]


def _variants(table: VariantTable) -> tuple[Variant, ...]:
    if isinstance(table, BuildApksResult):
        return table.variant
    return tuple(table)


def _all_apks_have(variant: Variant, has_metadata: Callable[[ApkDescription], bool]) -> bool:
    apks = variant.apk_descriptions()
    return bool(apks) and all(has_metadata(apk) for apk in apks)


def is_split_apk_variant(variant: Variant) -> bool:
    return _all_apks_have(variant, lambda apk: apk.split_apk_metadata is not None)


def is_standalone_apk_variant(variant: Variant) -> bool:
    return _all_apks_have(variant, lambda apk: apk.standalone_apk_metadata is not None)


def is_instant_apk_variant(variant: Variant) -> bool:
    return _all_apks_have(variant, lambda apk: apk.instant_apk_metadata is not None)


def is_system_apk_variant(variant: Variant) -> bool:
    """A system image may ship extra splits next to the system APK."""
    return any(apk.system_apk_metadata is not None for apk in variant.apk_descriptions())


def split_apk_variants(table: VariantTable) -> tuple[Variant, ...]:
    return tuple(v for v in _variants(table) if is_split_apk_variant(v))


def standalone_apk_variants(table: VariantTable) -> tuple[Variant, ...]:
    return tuple(v for v in _variants(table) if is_standalone_apk_variant(v))


def instant_apk_variants(table: VariantTable) -> tuple[Variant, ...]:
    return tuple(v for v in _variants(table) if is_instant_apk_variant(v))


def system_apk_variants(table: VariantTable) -> tuple[Variant, ...]:
    return tuple(v for v in _variants(table) if is_system_apk_variant(v))


def get_all_targeted_languages(result: BuildApksResult) -> frozenset[str]:
    """Every language value declared by any APK of the result."""
    languages: set[str] = set()
    for variant in result.variant:
        for apk in variant.apk_descriptions():
            if apk.targeting.language is not None:
                languages.update(apk.targeting.language.value)
    return frozenset(languages)


def get_all_base_master_split_paths(result: BuildApksResult) -> frozenset[str]:
    """Paths of the base module's master splits across all split variants."""
    return frozenset(
        apk.path
        for variant in split_apk_variants(result)
        for apk_set in variant.apk_set
        if apk_set.module_metadata.name == BASE_MODULE_NAME
        for apk in apk_set.apk_description
        if apk.split_apk_metadata is not None and apk.split_apk_metadata.is_master_split
    )
