"""
Configuration for the LapVault dashboard pipeline.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _default_file_map():
    return {
        "races": "races.csv",
        "circuits": "circuits.csv",
        "lap_times": "lap_times.csv",
        "constructors": "constructors.csv",
        "constructor_results": "constructor_results.csv",
    }


@dataclass
class Config:
    """Configuration with environment variable support."""

    # Paths - loaded from .env file
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("LAPVAULT_DATA_DIR", "./data"))
    )
    file_map: dict = field(default_factory=_default_file_map)

    # Logging
    log_level: str = field(
        default_factory=lambda: os.getenv("LAPVAULT_LOG_LEVEL", "INFO")
    )

    # Circuit qualification
    min_race_count: int = 15  # Strictly more races than this

    # Constructor flow
    major_min_results: int = 50  # Strictly more result rows than this
    major_limit: int = 8
    flow_scale: float = 3.0  # sqrt(races) * scale

    def __post_init__(self):
        """Accept plain strings for the data directory."""
        self.data_dir = Path(self.data_dir)
