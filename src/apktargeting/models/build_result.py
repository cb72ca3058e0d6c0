"""Generated-variant table: variants, APK sets and APK descriptions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .targeting import ApkTargeting, VariantTargeting

BASE_MODULE_NAME = "base"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class SplitApkMetadata(_Frozen):
    split_id: str = Field(default="", description="Split identifier; empty for the master split")
    is_master_split: bool = Field(default=False)


class StandaloneApkMetadata(_Frozen):
    fused_module_name: tuple[str, ...] = Field(default=(), description="Modules fused into the APK")


class InstantApkMetadata(_Frozen):
    split_id: str = Field(default="")
    is_master_split: bool = Field(default=False)


class SystemApkMetadata(_Frozen):
    fused_module_name: tuple[str, ...] = Field(default=())


_METADATA_FIELDS = (
    "split_apk_metadata",
    "standalone_apk_metadata",
    "instant_apk_metadata",
    "system_apk_metadata",
)


class ApkDescription(_Frozen):
    """One generated APK; carries exactly one kind of metadata."""

    path: str = Field(..., description="Path of the APK inside the APK set")
    targeting: ApkTargeting = Field(default_factory=ApkTargeting)
    split_apk_metadata: SplitApkMetadata | None = None
    standalone_apk_metadata: StandaloneApkMetadata | None = None
    instant_apk_metadata: InstantApkMetadata | None = None
    system_apk_metadata: SystemApkMetadata | None = None

    @model_validator(mode="after")
    def _single_metadata(self) -> ApkDescription:
        present = [name for name in _METADATA_FIELDS if getattr(self, name) is not None]
        if len(present) != 1:
            raise ValueError(
                f"APK '{self.path}' must carry exactly one metadata kind, got: {present or 'none'}"
            )
        return self


class ModuleMetadata(_Frozen):
    name: str = Field(..., description="Module name")


class ApkSet(_Frozen):
    """APKs generated for one module inside a variant."""

    module_metadata: ModuleMetadata
    apk_description: tuple[ApkDescription, ...] = Field(default=())


class Variant(_Frozen):
    """A group of APKs sharing one variant targeting and one artifact-set shape."""

    variant_number: int = Field(default=0, ge=0)
    targeting: VariantTargeting = Field(default_factory=VariantTargeting)
    apk_set: tuple[ApkSet, ...] = Field(default=())

    def apk_descriptions(self) -> tuple[ApkDescription, ...]:
        return tuple(apk for apk_set in self.apk_set for apk in apk_set.apk_description)


class BuildApksResult(_Frozen):
    """Top-level table of generated variants."""

    package_name: str = Field(default="")
    variant: tuple[Variant, ...] = Field(default=())
