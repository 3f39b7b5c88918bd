# lapvault/pipeline.py

import pandas as pd
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .config import Config
from .data_manager import DataManager
from .keys import canonical_key, canonical_keys
from .analytics import (
    FlowGraph,
    analyze_participation,
    build_circuit_dataset,
    build_constructor_flow,
    find_qualifying_circuits,
    get_circuit_lap_time_evolution,
    get_circuit_races,
    prepare_chart_rows,
    summarize_circuit,
)

logger = logging.getLogger("LapVault_Analytics")

TABLES = ('races', 'circuits', 'lap_times', 'constructors', 'constructor_results')


@dataclass
class DashboardData:
    """Everything the dashboard components render, computed in one pass."""
    qualifying_circuits: List[dict] = field(default_factory=list)
    circuit_data: Dict[object, dict] = field(default_factory=dict)
    participation: dict = field(default_factory=dict)
    chart_rows: pd.DataFrame = field(default_factory=pd.DataFrame)
    flow: FlowGraph = field(default_factory=FlowGraph)

    @property
    def is_empty(self) -> bool:
        return not self.qualifying_circuits and self.flow.is_empty


class LapVault:
    """
    Historical analysis over a set of fully loaded tables.
    Two independent branches: circuits -> lap evolution -> era participation,
    and the constructor flow graph.
    """

    def __init__(self, tables: dict, config: Config = None):
        self.tables = tables
        self.config = config or Config()

    @classmethod
    def from_disk(cls, config: Config = None):
        """Loads every table through the DataManager."""
        config = config or Config()
        dm = DataManager.from_config(config)
        return cls(dm.load_all(TABLES), config)

    def table(self, name) -> pd.DataFrame:
        df = self.tables.get(name)
        return df if df is not None else pd.DataFrame()

    # --- A. CIRCUIT BRANCH ---
    def qualifying_circuits(self):
        return find_qualifying_circuits(self.table('circuits'), self.table('races'),
                                        min_races=self.config.min_race_count)

    def circuit_evolution(self, circuit_id) -> pd.DataFrame:
        """
        Recomputes the lap evolution for one selected circuit.
        Logs the circuit summary, including seasons raced without lap data.
        """
        evolution = get_circuit_lap_time_evolution(circuit_id, self.table('races'), self.table('lap_times'))
        summary = summarize_circuit(self._circuit_record(circuit_id), evolution)

        logger.info(f"{summary['displayName'] or circuit_id}: {summary['totalRaces']} races, "
                    f"{summary['yearsOfData']} years of lap data, fastest {summary['fastestLapTime']}")
        if summary['missingYears']:
            logger.info(f"Missing lap time data for {len(summary['missingYears'])} years: {summary['missingYears']}")
        return evolution

    def circuit_summary(self, circuit_id) -> dict:
        """Panel facts for one circuit: race history, lap data range, fastest lap, missing years."""
        evolution = get_circuit_lap_time_evolution(circuit_id, self.table('races'), self.table('lap_times'))
        return summarize_circuit(self._circuit_record(circuit_id), evolution)

    def _circuit_record(self, circuit_id) -> dict:
        key = canonical_key(circuit_id)
        races = get_circuit_races(self.table('races'), circuit_id)
        record = {'circuitId': key, 'races': races, 'raceCount': len(races)}

        circuits = self.table('circuits')
        if not circuits.empty and 'circuitId' in circuits.columns:
            match = circuits[canonical_keys(circuits['circuitId']) == key]
            if not match.empty:
                record = {**match.iloc[0].to_dict(), **record}
        return record

    # --- B. CONSTRUCTOR BRANCH ---
    def constructor_flow(self) -> FlowGraph:
        return build_constructor_flow(
            self.table('races'),
            self.table('constructors'),
            self.table('constructor_results'),
            min_results=self.config.major_min_results,
            limit=self.config.major_limit,
            scale=self.config.flow_scale,
        )

    def dashboard(self) -> DashboardData:
        qualifying = self.qualifying_circuits()
        circuit_data = build_circuit_dataset(qualifying, self.table('races'), self.table('lap_times'))
        participation = analyze_participation(circuit_data)
        flow = self.constructor_flow()

        logger.info(f"Dashboard ready: {len(qualifying)} circuits, {len(flow.nodes)} flow nodes")
        return DashboardData(
            qualifying_circuits=qualifying,
            circuit_data=circuit_data,
            participation=participation,
            chart_rows=prepare_chart_rows(participation),
            flow=flow,
        )


def build_dashboard_data(tables: dict, config: Config = None) -> DashboardData:
    """Runs both analysis branches over fully loaded tables."""
    return LapVault(tables, config).dashboard()


def circuit_evolution(tables: dict, circuit_id) -> pd.DataFrame:
    """Recomputes the lap evolution for one selected circuit."""
    return LapVault(tables).circuit_evolution(circuit_id)


def load_dashboard_data(config: Config = None) -> DashboardData:
    """Loads every table from disk, then builds the dashboard data."""
    config = config or Config()
    logging.getLogger().setLevel(config.log_level)
    return LapVault.from_disk(config).dashboard()
