# lapvault/eras.py

import math

# ==========================================
# 1. ENGINE ERAS
# ==========================================

ERAS = ('early', 'v10', 'v8', 'hybrid')

ENGINE_ERAS = {
    'early':  {'name': 'Early Era',     'start': 1950, 'end': 1994, 'color': '#9b59b6', 'avg_hp': 350},
    'v10':    {'name': 'V10 Era',       'start': 1995, 'end': 2005, 'color': '#e74c3c', 'avg_hp': 850},
    'v8':     {'name': 'V8 Era',        'start': 2006, 'end': 2013, 'color': '#3498db', 'avg_hp': 750},
    'hybrid': {'name': 'V6 Hybrid Era', 'start': 2014, 'end': 2024, 'color': '#2ecc71', 'avg_hp': 1000},
}


def classify_era(year: int) -> str:
    """
    Buckets a season into its engine regulation era.
    Checked newest first, first match wins.
    """
    if year >= 2014: return 'hybrid'
    if year >= 2006: return 'v8'
    if year >= 1995: return 'v10'
    return 'early'


def era_index(era: str) -> int:
    """Chronological position of an era (early=0 ... hybrid=3)."""
    return ERAS.index(era)


def era_label(era: str) -> str:
    """'Early Era (1950-1994)' style label for legends and tooltips."""
    info = ENGINE_ERAS[era]
    return f"{info['name']} ({info['start']}-{info['end']})"


# ==========================================
# 2. LAP TIME FORMATTING
# ==========================================

def format_lap_time(milliseconds) -> str:
    """
    Formats a lap time as M:SS.mmm, or S.mmms for sub-minute laps.
    """
    if milliseconds is None: return 'N/A'
    try:
        ms = float(milliseconds)
    except (TypeError, ValueError):
        return 'N/A'
    if math.isnan(ms) or math.isinf(ms): return 'N/A'

    total_seconds = ms / 1000
    minutes = int(total_seconds // 60)
    seconds = total_seconds - minutes * 60

    if minutes > 0:
        return f"{minutes}:{seconds:06.3f}"
    return f"{seconds:.3f}s"
