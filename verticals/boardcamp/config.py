"""Boardcamp vertical configuration.

Builds the BoardcampConfig from the patterns module using environment
overrides.
"""

from patterns.domain_config import BoardcampConfig

# Process-wide configuration instance
config = BoardcampConfig.from_env()
