# lapvault/data_manager.py

import pandas as pd
import logging
from pathlib import Path
from concurrent.futures import ThreadPoolExecutor

from .config import Config
from .keys import normalize_keys

# SETUP LOGGING
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

# Ergast dumps write missing values as \N
NA_VALUES = ['\\N', '']

LOAD_ERRORS = (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError)


class DataManager:
    """
    DATA LAYER.
    Reads the historical CSV tables once, normalises their keys and keeps them cached.
    """
    def __init__(self, data_dir=None, file_map=None):
        config = Config()
        self.data_dir = Path(data_dir) if data_dir is not None else config.data_dir
        self.file_map = dict(file_map) if file_map is not None else config.file_map
        self.table_cache = {} # In-memory cache, one frame per table
        self.logger = logging.getLogger("LapVault_Data")

    @classmethod
    def from_config(cls, config: Config):
        return cls(data_dir=config.data_dir, file_map=config.file_map)

    def table_path(self, name) -> Path:
        if name not in self.file_map:
            raise KeyError(f"Unknown table '{name}'")
        return self.data_dir / self.file_map[name]

    def load_table(self, name) -> pd.DataFrame:
        """
        Loads one table. A missing or unreadable file is logged and
        comes back as an empty frame so the dashboard can show 'no data'.
        """
        if name in self.table_cache:
            return self.table_cache[name]

        path = self.table_path(name)
        try:
            df = pd.read_csv(path, na_values=NA_VALUES, keep_default_na=True)
        except LOAD_ERRORS as e:
            self.logger.error(f"❌ Failed to load {name} from {path}: {e}")
            return pd.DataFrame()

        df = normalize_keys(df)
        self.table_cache[name] = df
        self.logger.info(f"✅ Table Loaded: {name} ({len(df)} rows)")
        return df

    def load_all(self, names=None) -> dict:
        """
        Loads several tables concurrently and returns them once all have resolved.
        """
        names = list(names) if names is not None else list(self.file_map)
        if not names: return {}

        with ThreadPoolExecutor(max_workers=len(names)) as pool:
            frames = list(pool.map(self.load_table, names))

        tables = dict(zip(names, frames))
        self.logger.info(
            "Data loaded: " + ", ".join(f"{n}={len(df)}" for n, df in tables.items())
        )
        return tables

    def clear_cache(self):
        self.table_cache = {}
