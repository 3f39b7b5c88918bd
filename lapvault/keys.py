# lapvault/keys.py

import numpy as np
import pandas as pd

# Foreign keys shared by the five source tables
ID_COLUMNS = ('raceId', 'circuitId', 'driverId', 'constructorId')


def canonical_key(value):
    """
    Maps a raw identifier onto one canonical form.
    5, 5.0, "5" and " 5 " all become the int 5. Non-numeric refs stay strings.
    Missing values (None, NaN, NA, "") become None.
    """
    if value is None: return None
    if isinstance(value, str):
        value = value.strip()
        if not value: return None
    elif pd.isna(value):
        return None

    if isinstance(value, (bool, np.bool_, int, np.integer)):
        return int(value)

    # Integer text parses exactly, large ids included
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass

    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)

    if np.isfinite(number) and number.is_integer():
        return int(number)
    return str(value)


def canonical_keys(series: pd.Series) -> pd.Series:
    """Element-wise canonical_key. Always an object Series so ints never turn into floats."""
    return pd.Series([canonical_key(v) for v in series], index=series.index, dtype=object, name=series.name)


def normalize_keys(df: pd.DataFrame, columns=ID_COLUMNS) -> pd.DataFrame:
    """
    Returns a copy of the table with its id columns canonicalised.
    Columns that are not present are ignored.
    """
    out = df.copy()
    for col in columns:
        if col in out.columns:
            out[col] = canonical_keys(out[col])
    return out
