"""Match semantics per targeting dimension."""

# Rule names for reference in tests and decision logs
RULE_EMPTY_TARGETING_MATCHES = "any dimension: targeting with no values and no alternatives matches every device"
RULE_DISJOINT = "any dimension: values and alternatives must be mutually exclusive"
RULE_ABI_PREFERRED = "abi: first device ABI, in preference order, found in values matches and in alternatives rejects; fallback when none"
RULE_MULTI_ABI_BEST_SET = "multi_abi: a value set is contained in device ABIs and no contained alternative is preferable"
RULE_DENSITY_BEST_MATCH = "screen_density: value is the framework's best density for the device among values and alternatives"
RULE_LANGUAGE_ANY_OR_FALLBACK = "language: device language in values (ANY), or fallback when alternatives miss a device language"
RULE_SDK_VERSION_FLOOR = "sdk_version: best floor <= device SDK is a value, not an alternative"
RULE_TCF_PREFERRED = "texture_compression_format: most preferred device format found in values, or fallback"
RULE_DEVICE_TIER_EXACT_OR_FALLBACK = "device_tier: device tier equals a value, or empty values when the device has none"
RULE_COUNTRY_SET_EXACT_OR_FALLBACK = "country_set: device country set equals a value, or empty values when the device has none"
RULE_SDK_RUNTIME_CAPABILITY = "sdk_runtime: requiring the runtime needs device support; not requiring matches all"
RULE_SANITIZER_EXACT_OR_PLAIN = "sanitizer: device sanitizer equals a value; devices without one take the plain build"
