"""Targeting dimensions and the static lookup tables behind them.

The tables are built once at import and exposed read-only. Values that are
missing from a table are still valid targeting values: the ordering helpers
place them after every known value, ordered by their literal.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class TargetingDimension(str, Enum):
    """Independent axes of device variation.

    The value of each member is the field name carrying that dimension on
    every targeting aggregate.
    """

    abi = "abi"
    multi_abi = "multi_abi"
    screen_density = "screen_density"
    language = "language"
    sdk_version = "sdk_version"
    texture_compression_format = "texture_compression_format"
    device_tier = "device_tier"
    country_set = "country_set"
    sdk_runtime = "sdk_runtime"
    sanitizer = "sanitizer"


# --- ABI ---

# arm < x86 < mips < riscv, 32 bits < 64 bits, older CPU < newer CPU
ABI_ORDER: tuple[str, ...] = (
    "armeabi",
    "armeabi-v7a",
    "arm64-v8a",
    "x86",
    "x86_64",
    "mips",
    "mips64",
    "riscv64",
)
_ABI_RANK = MappingProxyType({name: rank for rank, name in enumerate(ABI_ORDER)})


def is_known_abi(abi: str) -> bool:
    return abi in _ABI_RANK


def abi_preference(abi: str) -> int:
    """Higher is more preferred; unknown ABIs rank below every known one."""
    return _ABI_RANK.get(abi, -1)


def abi_sort_key(abi: str) -> tuple[int, int, str]:
    """Declared architecture order; unknown ABIs last, by literal."""
    rank = _ABI_RANK.get(abi)
    if rank is None:
        return (1, 0, abi)
    return (0, rank, "")


# --- Screen density ---

# Based on android/configuration.h.
LDPI_VALUE = 120
MDPI_VALUE = 160
TVDPI_VALUE = 213
HDPI_VALUE = 240
XHDPI_VALUE = 320
XXHDPI_VALUE = 480
XXXHDPI_VALUE = 640
ANY_DENSITY_VALUE = 0xFFFE
NONE_DENSITY_VALUE = 0xFFFF

DENSITY_ALIAS_TO_DPI = MappingProxyType(
    {
        "LDPI": LDPI_VALUE,
        "MDPI": MDPI_VALUE,
        "TVDPI": TVDPI_VALUE,
        "HDPI": HDPI_VALUE,
        "XHDPI": XHDPI_VALUE,
        "XXHDPI": XXHDPI_VALUE,
        "XXXHDPI": XXXHDPI_VALUE,
        "NODPI": NONE_DENSITY_VALUE,
    }
)


def density_alias_dpi(alias: str) -> int | None:
    """DPI behind a named density alias, or None for an unknown alias."""
    return DENSITY_ALIAS_TO_DPI.get(alias)


# --- Texture compression formats ---

# Least to most preferred.
TEXTURE_COMPRESSION_FORMAT_ORDER: tuple[str, ...] = (
    "paletted",
    "etc1",
    "etc2",
    "3dc",
    "atc",
    "latc",
    "dxt1",
    "s3tc",
    "pvrtc",
    "astc",
)
_TCF_RANK = MappingProxyType(
    {name: rank for rank, name in enumerate(TEXTURE_COMPRESSION_FORMAT_ORDER)}
)

GL_EXTENSION_TO_TEXTURE_COMPRESSION_FORMAT = MappingProxyType(
    {
        "GL_KHR_texture_compression_astc_ldr": "astc",
        "GL_AMD_compressed_ATC_texture": "atc",
        "GL_EXT_texture_compression_dxt1": "dxt1",
        "GL_OES_compressed_ETC1_RGB8_texture": "etc1",
        "GL_EXT_texture_compression_latc": "latc",
        "GL_OES_compressed_paletted_texture": "paletted",
        "GL_IMG_texture_compression_pvrtc": "pvrtc",
        "GL_EXT_texture_compression_s3tc": "s3tc",
        "GL_AMD_compressed_3DC_texture": "3dc",
    }
)

# OpenGL ES 3.0 mandates ETC2 support.
GL_ES_3_0 = 0x30000


def texture_compression_formats_for_gl(gl_es_version: int) -> tuple[str, ...]:
    if gl_es_version >= GL_ES_3_0:
        return ("etc2",)
    return ()


def texture_compression_format_preference(tcf: str) -> int:
    """Higher is more preferred; unknown formats rank below every known one."""
    return _TCF_RANK.get(tcf, -1)


# --- Sanitizers ---

NO_SANITIZER = "none"

# Declared order of the native-code sanitizer aliases.
SANITIZER_ORDER: tuple[str, ...] = (NO_SANITIZER, "hwaddress")
_SANITIZER_RANK = MappingProxyType({name: rank for rank, name in enumerate(SANITIZER_ORDER)})


def sanitizer_sort_key(sanitizer: str) -> tuple[int, int, str]:
    rank = _SANITIZER_RANK.get(sanitizer)
    if rank is None:
        return (1, 0, sanitizer)
    return (0, rank, "")


# --- SDK versions ---

# Floor used by apps built against a pre-release platform.
DEVELOPMENT_SDK_VERSION = 10_000
