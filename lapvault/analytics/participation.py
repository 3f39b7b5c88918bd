# lapvault/analytics/participation.py

import math
import pandas as pd
import logging

from ..eras import ERAS

logger = logging.getLogger("LapVault_Analytics")

# Long official names -> chart labels
SHORT_NAMES = {
    'Circuit de Spa-Francorchamps': 'Spa',
    'Circuit de Monaco': 'Monaco',
    'Circuit Gilles Villeneuve': 'Canada',
    'Circuit de Nevers Magny-Cours': 'Magny-Cours',
    'Circuit Paul Ricard': 'Paul Ricard',
    'Autodromo Nazionale di Monza': 'Monza',
    'Autodromo Hermanos Rodriguez': 'Mexico',
    'Autodromo Jose Carlos Pace': 'Interlagos',
    'Autodromo Enzo e Dino Ferrari': 'Imola',
    'Silverstone Circuit': 'Silverstone',
    'Suzuka Circuit': 'Suzuka',
    'Hungaroring': 'Hungary',
    'Red Bull Ring': 'Austria',
    'Bahrain International Circuit': 'Bahrain',
    'Shanghai International Circuit': 'China',
    'Melbourne Grand Prix Circuit': 'Melbourne',
    'Marina Bay Street Circuit': 'Singapore',
    'Yas Marina Circuit': 'Abu Dhabi',
    'Circuit of the Americas': 'COTA',
}


def create_short_name(full_name: str) -> str:
    """
    Short axis label for a circuit name.
    Lookup table first, then prefix rules, then plain truncation.
    """
    if full_name in SHORT_NAMES: return SHORT_NAMES[full_name]

    if full_name.startswith('Circuit de '):
        remaining = full_name.replace('Circuit de ', '', 1)
        return remaining.split('-')[0] if '-' in remaining else remaining.split(' ')[0]

    if full_name.startswith('Autodromo '):
        remaining = full_name.replace('Autodromo ', '', 1)
        if 'di ' in remaining: return remaining.split('di ')[1].split(' ')[0]
        if 'Hermanos' in remaining: return 'Mexico'
        if 'Jose Carlos' in remaining: return 'Interlagos'
        return remaining.split(' ')[0]

    return full_name[:10] if len(full_name) > 12 else full_name


def _records(lap_time_data):
    if lap_time_data is None: return []
    if isinstance(lap_time_data, pd.DataFrame):
        return lap_time_data.to_dict('records')
    return list(lap_time_data)


def analyze_participation(all_circuit_data: dict) -> dict:
    """
    Cross-circuit era analysis for the stacked bar chart.

    For every circuit with lap data: how many seasons each era contributes,
    per-era years/times/best time, and which era holds the all-time fastest
    lap (the record holder). Ties on the record go to the earliest entry.

    Returns {'circuitAnalysis': [...], 'globalEraStats': {era: {recordCount, totalCircuits}}}
    with circuits ordered by number of seasons, most first.
    """
    circuit_analysis = []
    record_counts = {era: 0 for era in ERAS}
    era_circuits = {era: set() for era in ERAS}

    for circuit_id, circuit_info in all_circuit_data.items():
        lap_data = _records(circuit_info.get('lapTimeData'))
        if not lap_data: continue

        name = circuit_info.get('name')
        if not isinstance(name, str): name = ''
        participation = {era: 0 for era in ERAS}
        details = {era: {'years': [], 'times': [], 'bestTime': math.inf} for era in ERAS}

        # 1. Per-era counts
        for entry in lap_data:
            era = entry.get('era')
            if era not in participation:
                logger.warning(f"⚠️ Unknown era '{era}' at {name} ({entry.get('year')}), skipped")
                continue

            participation[era] += 1
            details[era]['years'].append(entry['year'])
            details[era]['times'].append(entry['milliseconds'])
            details[era]['bestTime'] = min(details[era]['bestTime'], entry['milliseconds'])
            era_circuits[era].add(circuit_id)

        # 2. All-time fastest lap. Strict < keeps the first of equal minima.
        fastest = lap_data[0]
        for entry in lap_data[1:]:
            if entry['milliseconds'] < fastest['milliseconds']:
                fastest = entry

        record_era = fastest.get('era')
        if record_era in record_counts:
            record_counts[record_era] += 1
        else:
            logger.warning(f"⚠️ Record lap at {name} has unknown era '{record_era}', not counted")

        circuit_analysis.append({
            'circuitId': circuit_id,
            'name': name,
            'shortName': create_short_name(name),
            'location': circuit_info.get('location'),
            'country': circuit_info.get('country'),
            'recordHolder': record_era,
            'recordYear': fastest.get('year'),
            'recordTime': fastest['milliseconds'],
            'eraParticipation': participation,
            'eraDetails': details,
            'totalYears': len(lap_data),
        })

    global_stats = {
        era: {'recordCount': record_counts[era], 'totalCircuits': len(era_circuits[era])}
        for era in ERAS
    }

    circuit_analysis.sort(key=lambda c: c['totalYears'], reverse=True)
    return {'circuitAnalysis': circuit_analysis, 'globalEraStats': global_stats}


def prepare_chart_rows(analysis: dict) -> pd.DataFrame:
    """
    Flattens the circuit analysis into one row per circuit for the stacked bars.
    """
    columns = ['name', 'fullName', 'recordHolder', 'recordYear', 'recordTime', 'totalYears', *ERAS, 'eraDetails']
    rows = []
    for circuit in analysis.get('circuitAnalysis', []):
        rows.append({
            'name': circuit['shortName'],
            'fullName': circuit['name'],
            'recordHolder': circuit['recordHolder'],
            'recordYear': circuit['recordYear'],
            'recordTime': circuit['recordTime'],
            'totalYears': circuit['totalYears'],
            **circuit['eraParticipation'],
            'eraDetails': circuit['eraDetails'],
        })
    return pd.DataFrame(rows, columns=columns)
