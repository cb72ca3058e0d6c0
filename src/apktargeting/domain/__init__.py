"""Domain layer: dimensions, normalization, matching and classification."""
