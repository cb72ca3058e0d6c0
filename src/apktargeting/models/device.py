"""Device property bundle consumed by the matchers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..domain.dimensions import (
    DEVELOPMENT_SDK_VERSION,
    GL_EXTENSION_TO_TEXTURE_COMPRESSION_FORMAT,
    texture_compression_formats_for_gl,
)


class DeviceSpec(BaseModel):
    """Resolved properties of one physical or virtual device.

    Zero, empty and None values mean the device does not report that property.
    """

    model_config = ConfigDict(frozen=True)

    supported_abis: tuple[str, ...] = Field(
        default=(), description="ABIs in the device's order of preference"
    )
    supported_locales: tuple[str, ...] = Field(
        default=(), description="Locales, e.g. 'en-US', in order of preference"
    )
    screen_density: int = Field(default=0, ge=0, description="Screen density in DPI")
    sdk_version: int = Field(default=0, ge=0, description="Platform API level")
    codename: str = Field(default="", description="Pre-release platform codename, if any")
    gl_extensions: tuple[str, ...] = Field(default=(), description="Supported OpenGL extensions")
    gl_es_version: int = Field(default=0, ge=0, description="OpenGL ES version, e.g. 0x30000")
    supported_texture_compression_formats: tuple[str, ...] = Field(
        default=(), description="Texture compression formats declared directly"
    )
    device_tier: str | None = Field(default=None, description="Device tier name")
    country_set: str | None = Field(default=None, description="Country set name")
    sdk_runtime_supported: bool | None = Field(
        default=None, description="Whether the device ships the SDK runtime"
    )
    sanitizer: str | None = Field(
        default=None, description="Sanitizer the system image is built with, e.g. 'hwaddress'"
    )

    @property
    def languages(self) -> tuple[str, ...]:
        """Language subtags of the supported locales, deduplicated, in order."""
        seen: list[str] = []
        for locale in self.supported_locales:
            language = locale.replace("_", "-").split("-")[0].lower()
            if language and language not in seen:
                seen.append(language)
        return tuple(seen)

    @property
    def effective_sdk_version(self) -> int:
        """SDK version used for matching; pre-release devices match development floors."""
        if self.codename:
            return max(self.sdk_version, DEVELOPMENT_SDK_VERSION)
        return self.sdk_version

    @property
    def texture_compression_formats(self) -> frozenset[str]:
        """Declared formats plus those implied by GL extensions and the GL ES version."""
        formats = set(self.supported_texture_compression_formats)
        for extension in self.gl_extensions:
            tcf = GL_EXTENSION_TO_TEXTURE_COMPRESSION_FORMAT.get(extension)
            if tcf is not None:
                formats.add(tcf)
        formats.update(texture_compression_formats_for_gl(self.gl_es_version))
        return frozenset(formats)
