# lapvault/analytics/lap_times.py

import pandas as pd
import logging

from ..eras import classify_era, format_lap_time
from ..keys import canonical_keys
from .circuits import get_circuit_races

logger = logging.getLogger("LapVault_Analytics")

EVOLUTION_COLUMNS = ['year', 'milliseconds', 'seconds', 'timeString', 'era', 'raceId', 'driverId', 'lap']


def _empty_evolution() -> pd.DataFrame:
    return pd.DataFrame(columns=EVOLUTION_COLUMNS)


def get_circuit_lap_time_evolution(circuit_id, races: pd.DataFrame, lap_times: pd.DataFrame) -> pd.DataFrame:
    """
    Fastest recorded lap per season at one circuit.

    One row per year that has at least one valid lap (milliseconds > 0),
    sorted by year. When several laps share the minimum, the first one
    in lap table order wins.
    """
    circuit_races = get_circuit_races(races, circuit_id)
    if circuit_races.empty:
        logger.info(f"No races found for circuit {circuit_id}")
        return _empty_evolution()

    if 'year' not in circuit_races.columns or 'raceId' not in circuit_races.columns:
        return _empty_evolution()
    if lap_times.empty or 'raceId' not in lap_times.columns or 'milliseconds' not in lap_times.columns:
        return _empty_evolution()

    # 1. raceId -> season (races without a year cannot be placed)
    circuit_races = circuit_races[pd.to_numeric(circuit_races['year'], errors='coerce').notna()]
    race_year = dict(zip(canonical_keys(circuit_races['raceId']),
                         pd.to_numeric(circuit_races['year']).astype(int)))

    # 2. Valid laps at this circuit only
    laps = lap_times.copy()
    laps['raceId'] = canonical_keys(laps['raceId'])
    laps['milliseconds'] = pd.to_numeric(laps['milliseconds'], errors='coerce')
    laps = laps[laps['raceId'].isin(list(race_year)) & (laps['milliseconds'] > 0)]

    logger.info(f"Found {len(laps)} lap times for circuit {circuit_id}")
    if laps.empty:
        return _empty_evolution()

    # 3. Fastest lap per season. idxmin keeps the first of equal minima.
    laps = laps.reset_index(drop=True)
    laps['year'] = laps['raceId'].map(race_year)
    fastest = laps.loc[laps.groupby('year', sort=True)['milliseconds'].idxmin().values]

    evolution = pd.DataFrame({
        'year': fastest['year'].astype(int).values,
        'milliseconds': fastest['milliseconds'].values,
        'seconds': fastest['milliseconds'].values / 1000,
        'timeString': fastest['time'].values if 'time' in fastest.columns else None,
        'era': [classify_era(y) for y in fastest['year']],
        'raceId': fastest['raceId'].values,
        'driverId': fastest['driverId'].values if 'driverId' in fastest.columns else None,
        'lap': fastest['lap'].values if 'lap' in fastest.columns else None,
    }, columns=EVOLUTION_COLUMNS)

    logger.info(f"Processed {len(evolution)} years of data for circuit {circuit_id}")
    return evolution.sort_values('year', kind='mergesort').reset_index(drop=True)


def find_missing_lap_years(circuit_races: pd.DataFrame, evolution: pd.DataFrame):
    """
    Seasons raced at the circuit that have no lap time data.
    The lap timing archive only starts in the mid nineties, so older years show up here.
    """
    if circuit_races.empty or 'year' not in circuit_races.columns:
        return []

    race_years = pd.to_numeric(circuit_races['year'], errors='coerce').dropna().astype(int)
    lap_years = set(evolution['year'].astype(int)) if not evolution.empty else set()
    return sorted(int(y) for y in set(race_years) - lap_years)


def summarize_circuit(circuit: dict, evolution: pd.DataFrame) -> dict:
    """
    Headline facts for the selected circuit panel.

    Race history comes from the circuit's races, the lap figures from its
    evolution. Without lap data the range and fastest lap are None.
    """
    circuit_races = circuit.get('races')
    if circuit_races is None: circuit_races = pd.DataFrame(columns=['raceId', 'year'])

    race_years = pd.to_numeric(circuit_races['year'], errors='coerce').dropna().astype(int) \
        if 'year' in circuit_races.columns else pd.Series(dtype=int)
    has_laps = evolution is not None and not evolution.empty
    fastest = int(evolution['milliseconds'].min()) if has_laps else None

    return {
        'circuitId': circuit.get('circuitId'),
        'displayName': circuit.get('displayName') or circuit.get('name'),
        'location': circuit.get('location'),
        'country': circuit.get('country'),
        'totalRaces': int(circuit.get('raceCount', len(circuit_races))),
        'firstRace': int(race_years.min()) if not race_years.empty else None,
        'latestRace': int(race_years.max()) if not race_years.empty else None,
        'dataRange': (int(evolution['year'].min()), int(evolution['year'].max())) if has_laps else None,
        'yearsOfData': len(evolution) if has_laps else 0,
        'fastestLap': fastest,
        'fastestLapTime': format_lap_time(fastest),
        'missingYears': find_missing_lap_years(circuit_races, evolution if has_laps else pd.DataFrame()),
    }


def build_circuit_dataset(qualifying, races: pd.DataFrame, lap_times: pd.DataFrame) -> dict:
    """
    Runs the lap time aggregation for every qualifying circuit.
    Returns {circuitId: {name, location, country, lapTimeData}} in qualifying order.
    """
    dataset = {}
    for circuit in qualifying:
        circuit_id = circuit['circuitId']
        dataset[circuit_id] = {
            'name': circuit.get('name'),
            'location': circuit.get('location'),
            'country': circuit.get('country'),
            'lapTimeData': get_circuit_lap_time_evolution(circuit_id, races, lap_times),
        }
    return dataset
