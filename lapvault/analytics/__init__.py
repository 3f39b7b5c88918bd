from .circuits import ACTIVE_CIRCUITS, find_qualifying_circuits, get_circuit_races
from .lap_times import (
    build_circuit_dataset, find_missing_lap_years, get_circuit_lap_time_evolution, summarize_circuit,
)
from .participation import analyze_participation, create_short_name, prepare_chart_rows
from .constructor_flow import (
    ConstructorAnalysis, FlowGraph, FlowLink, FlowNode,
    analyze_constructors, build_constructor_flow,
)
