"""
Tests for the cross-circuit era participation analysis.
"""

import logging
import math

import pandas as pd
import pytest

from lapvault.analytics.participation import analyze_participation, create_short_name, prepare_chart_rows


def make_year(year, ms, era):
    """Helper to create one per-season fastest lap entry."""
    return {'year': year, 'milliseconds': ms, 'seconds': ms / 1000, 'era': era}


def make_circuit(name, entries, as_frame=False):
    data = pd.DataFrame(entries) if as_frame else entries
    return {'name': name, 'location': 'Town', 'country': 'Land', 'lapTimeData': data}


class TestCreateShortName:
    """Tests for the chart label shortening."""

    @pytest.mark.parametrize("full,short", [
        ('Circuit de Spa-Francorchamps', 'Spa'),
        ('Autodromo Nazionale di Monza', 'Monza'),
        ('Circuit of the Americas', 'COTA'),
        ('Hungaroring', 'Hungary'),
    ])
    def test_lookup_table(self, full, short):
        """Test names that have a fixed short form."""
        assert create_short_name(full) == short

    def test_circuit_de_prefix(self):
        """Test the 'Circuit de' rule with and without a hyphen."""
        assert create_short_name('Circuit de Barcelona-Catalunya') == 'Barcelona'
        assert create_short_name('Circuit de Reims Gueux') == 'Reims'

    def test_autodromo_prefix(self):
        """Test the 'Autodromo' rules."""
        assert create_short_name('Autodromo Internazionale di Imola') == 'Imola'
        assert create_short_name('Autodromo Hermanos Rodriguez Nuevo') == 'Mexico'
        assert create_short_name('Autodromo Jose Carlos Pace Interlagos') == 'Interlagos'
        assert create_short_name('Autodromo Juan y Oscar Galvez') == 'Juan'

    def test_truncation(self):
        """Test plain names: long ones cut to 10 chars, short ones kept."""
        assert create_short_name('Las Vegas Strip Street Circuit') == 'Las Vegas '
        assert create_short_name('Baku City Ci') == 'Baku City Ci'
        assert create_short_name('Zandvoort') == 'Zandvoort'


class TestAnalyzeParticipation:
    """Tests for analyze_participation."""

    def test_counts_and_record_holder(self):
        """Test per-era counts, details and the record era for one circuit."""
        data = {1: make_circuit('Suzuka Circuit', [
            make_year(1990, 100000, 'early'),
            make_year(2004, 90000, 'v10'),
            make_year(2005, 91000, 'v10'),
            make_year(2019, 92000, 'hybrid'),
        ])}

        result = analyze_participation(data)
        circuit = result['circuitAnalysis'][0]

        assert circuit['shortName'] == 'Suzuka'
        assert circuit['eraParticipation'] == {'early': 1, 'v10': 2, 'v8': 0, 'hybrid': 1}
        assert circuit['recordHolder'] == 'v10'
        assert circuit['recordYear'] == 2004
        assert circuit['recordTime'] == 90000
        assert circuit['eraDetails']['v10'] == {'years': [2004, 2005], 'times': [90000, 91000], 'bestTime': 90000}
        assert math.isinf(circuit['eraDetails']['v8']['bestTime'])
        assert circuit['totalYears'] == 4

    def test_participation_sums_to_total_years(self):
        """Test that era counts add up to the number of seasons."""
        data = {
            1: make_circuit('A', [make_year(y, 90000 - y, 'v10') for y in range(1995, 2000)]),
            2: make_circuit('B', [make_year(2010, 80000, 'v8'), make_year(2020, 79000, 'hybrid')]),
        }

        for circuit in analyze_participation(data)['circuitAnalysis']:
            assert sum(circuit['eraParticipation'].values()) == circuit['totalYears']

    def test_global_stats(self):
        """Test record counts and circuit participation per era."""
        data = {
            1: make_circuit('A', [make_year(2000, 80000, 'v10'), make_year(2015, 85000, 'hybrid')]),
            2: make_circuit('B', [make_year(2001, 90000, 'v10'), make_year(2016, 70000, 'hybrid')]),
            3: make_circuit('C', [make_year(2010, 75000, 'v8')]),
            4: make_circuit('D', []),
        }

        stats = analyze_participation(data)['globalEraStats']

        assert stats['v10'] == {'recordCount': 1, 'totalCircuits': 2}
        assert stats['hybrid'] == {'recordCount': 1, 'totalCircuits': 2}
        assert stats['v8'] == {'recordCount': 1, 'totalCircuits': 1}
        assert stats['early'] == {'recordCount': 0, 'totalCircuits': 0}
        # One record per circuit with data
        assert sum(s['recordCount'] for s in stats.values()) == 3

    def test_skips_circuits_without_data(self):
        """Test that empty lap data leaves the circuit out."""
        data = {1: make_circuit('A', []), 2: make_circuit('B', pd.DataFrame())}
        assert analyze_participation(data)['circuitAnalysis'] == []

    def test_sorted_by_total_years(self):
        """Test ordering by number of seasons, most first."""
        data = {
            1: make_circuit('Short', [make_year(2000, 1, 'v10')]),
            2: make_circuit('Long', [make_year(y, 1, 'v10') for y in range(1995, 2000)]),
            3: make_circuit('Mid', [make_year(y, 1, 'v8') for y in range(2006, 2009)]),
        }

        names = [c['name'] for c in analyze_participation(data)['circuitAnalysis']]
        assert names == ['Long', 'Mid', 'Short']

    def test_record_tie_keeps_first(self):
        """Test that equal record laps go to the earliest entry."""
        data = {1: make_circuit('A', [make_year(1999, 80000, 'v10'), make_year(2018, 80000, 'hybrid')])}

        circuit = analyze_participation(data)['circuitAnalysis'][0]
        assert circuit['recordHolder'] == 'v10'

    def test_unknown_era_warns_and_is_skipped(self, caplog):
        """Test that a bad era tag is logged and not counted."""
        data = {1: make_circuit('A', [make_year(2000, 80000, 'v10'), make_year(2001, 90000, 'v12')])}

        with caplog.at_level(logging.WARNING, logger="LapVault_Analytics"):
            circuit = analyze_participation(data)['circuitAnalysis'][0]

        assert circuit['eraParticipation'] == {'early': 0, 'v10': 1, 'v8': 0, 'hybrid': 0}
        assert "Unknown era 'v12'" in caplog.text

    def test_accepts_dataframe_input(self):
        """Test lap data supplied as a frame straight from the aggregator."""
        data = {1: make_circuit('A', [make_year(2007, 80000, 'v8')], as_frame=True)}

        circuit = analyze_participation(data)['circuitAnalysis'][0]
        assert circuit['eraParticipation']['v8'] == 1


class TestPrepareChartRows:
    """Tests for the stacked bar rows."""

    def test_one_row_per_circuit(self):
        """Test flattening of the analysis."""
        data = {
            1: make_circuit('Circuit de Monaco', [make_year(2000, 80000, 'v10'), make_year(2010, 79000, 'v8')]),
        }

        rows = prepare_chart_rows(analyze_participation(data))

        assert len(rows) == 1
        row = rows.iloc[0]
        assert row['name'] == 'Monaco'
        assert row['fullName'] == 'Circuit de Monaco'
        assert row['recordHolder'] == 'v8'
        assert (row['v10'], row['v8'], row['early'], row['hybrid']) == (1, 1, 0, 0)
        assert row['eraDetails']['v10']['bestTime'] == 80000
        assert row['eraDetails']['v8']['years'] == [2010]
        assert math.isinf(row['eraDetails']['early']['bestTime'])

    def test_empty(self):
        """Test that no analysis gives an empty frame with the chart columns."""
        rows = prepare_chart_rows({'circuitAnalysis': []})
        assert rows.empty
        assert 'hybrid' in rows.columns
        assert 'eraDetails' in rows.columns
