# lapvault/analytics/circuits.py

import pandas as pd
import logging

from ..keys import canonical_key, canonical_keys

logger = logging.getLogger("LapVault_Analytics")

# Circuits on the current calendar, matched against circuits.name
ACTIVE_CIRCUITS = (
    'Albert Park Grand Prix Circuit',      # Australia
    'Bahrain International Circuit',       # Bahrain
    'Shanghai International Circuit',      # China
    'Suzuka Circuit',                      # Japan
    'Miami International Autodrome',       # Miami
    'Autodromo Enzo e Dino Ferrari',       # Imola
    'Circuit de Monaco',                   # Monaco
    'Circuit de Barcelona-Catalunya',      # Spain
    'Circuit Gilles Villeneuve',           # Canada
    'Red Bull Ring',                       # Austria
    'Silverstone Circuit',                 # Great Britain
    'Circuit de Spa-Francorchamps',        # Belgium
    'Hungaroring',                         # Hungary
    'Circuit Park Zandvoort',              # Netherlands
    'Autodromo Nazionale di Monza',        # Italy
    'Baku City Circuit',                   # Azerbaijan
    'Marina Bay Street Circuit',           # Singapore
    'Circuit of the Americas',             # USA
    'Autódromo Hermanos Rodríguez',        # Mexico
    'Autódromo José Carlos Pace',          # Brazil (Interlagos)
    'Las Vegas Strip Street Circuit',      # Las Vegas
    'Losail International Circuit',        # Qatar
    'Yas Marina Circuit',                  # Abu Dhabi
)

MIN_RACE_COUNT = 15


def get_circuit_races(races: pd.DataFrame, circuit_id) -> pd.DataFrame:
    """
    All races held at one circuit. circuit_id may be numeric or its string form.
    """
    key = canonical_key(circuit_id)
    if key is None or races.empty or 'circuitId' not in races.columns:
        return races.iloc[0:0].copy()

    mask = canonical_keys(races['circuitId']) == key
    return races.loc[mask].copy().reset_index(drop=True)


def find_qualifying_circuits(circuits: pd.DataFrame, races: pd.DataFrame,
                             min_races=MIN_RACE_COUNT, active_circuits=ACTIVE_CIRCUITS):
    """
    Selects circuits with a long history (more than `min_races` races)
    that are still on the calendar.
    Returns a list of circuit dicts extended with displayName, raceCount and
    races (a frame of that circuit's races), busiest circuit first.
    """
    if circuits.empty or races.empty or 'circuitId' not in races.columns:
        logger.info("Total qualifying circuits: 0")
        return []

    # 1. Race count per circuit (races without a circuit are ignored)
    race_keys = canonical_keys(races['circuitId'])
    race_counts = race_keys.dropna().value_counts()
    active = set(active_circuits)

    qualifying = []
    for circuit in circuits.to_dict('records'):
        key = canonical_key(circuit.get('circuitId'))
        race_count = int(race_counts.get(key, 0)) if key is not None else 0
        name = circuit.get('name')
        if not isinstance(name, str): name = None
        is_active = name in active

        logger.debug(f"{name}: {race_count} races, active: {is_active}")

        if race_count > min_races and is_active:
            circuit_races = races.loc[race_keys == key].copy().reset_index(drop=True)
            qualifying.append({
                **circuit,
                'circuitId': key,
                'displayName': name or circuit.get('circuitRef'),
                'raceCount': race_count,
                'races': circuit_races,
            })

    logger.info(f"Total qualifying circuits: {len(qualifying)}")

    # Stable: ties keep the circuits table order
    return sorted(qualifying, key=lambda c: c['raceCount'], reverse=True)
