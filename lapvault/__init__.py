"""
LapVault: historical F1 lap time evolution across circuits, eras and constructors.
"""

from .eras import ERAS, ENGINE_ERAS, classify_era, format_lap_time
from .keys import canonical_key, normalize_keys

__version__ = "0.1.0"
