# lapvault/analytics/constructor_flow.py

import numpy as np
import pandas as pd
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..eras import ERAS, ENGINE_ERAS, classify_era
from ..keys import canonical_keys

logger = logging.getLogger("LapVault_Analytics")

# ==========================================
# 1. DATA STRUCTURES
# ==========================================

@dataclass
class FlowNode:
    id: str
    name: str
    stage: int
    color: str
    avg_hp: Optional[int] = None
    constructor_id: Optional[object] = None

@dataclass
class FlowLink:
    source: str
    target: str
    value: float
    description: str

@dataclass
class FlowGraph:
    nodes: List[FlowNode] = field(default_factory=list)
    links: List[FlowLink] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self):
        return [n.id for n in self.nodes]

    def stage(self, index: int) -> List[FlowNode]:
        return [n for n in self.nodes if n.stage == index]

@dataclass
class ConstructorAnalysis:
    major_constructors: pd.DataFrame  # constructorId, name, participation
    era_counts: pd.DataFrame          # index constructorId, one column per era
    performance: pd.DataFrame         # index constructorId: totalPoints, raceCount, avgPoints


# ==========================================
# 2. FIXED GRAPH CONFIGURATION
# ==========================================

STAGE_CONSTRUCTOR, STAGE_ERA, STAGE_POWER, STAGE_PERFORMANCE = 0, 1, 2, 3

CONSTRUCTOR_COLORS = {
    'Ferrari': '#DC143C',
    'McLaren': '#FF8700',
    'Williams': '#005AFF',
    'Mercedes': '#00D2BE',
    'Red Bull': '#0600EF',
    'Renault': '#0082FA',
    'Lotus': '#FFD700',
    'Tyrrell': '#800080',
}
DEFAULT_CONSTRUCTOR_COLOR = '#666'

ERA_LINK_LABELS = {'early': 'early', 'v10': 'V10', 'v8': 'V8', 'hybrid': 'hybrid'}

POWER_NODES = [
    ('low_hp', 'Low Power\n(300-500 HP)', '#95a5a6'),
    ('med_hp', 'Medium Power\n(500-800 HP)', '#f39c12'),
    ('high_hp', 'High Power\n(800-950 HP)', '#e67e22'),
    ('ultra_hp', 'Ultra Power\n(1000+ HP)', '#c0392b'),
]

PERFORMANCE_NODES = [
    ('champions', 'Championship\nContenders', '#ff1744'),
    ('competitive', 'Competitive\nTeams', '#ff5722'),
    ('midfield', 'Midfield\nRunners', '#ff9800'),
    ('backmarkers', 'Backmarker\nTeams', '#ffc107'),
]

# Hand-authored domain mapping, not derived from the data
ERA_POWER_LINKS = [
    ('early_era', 'low_hp', 30, 'Early era: ~350 HP average'),
    ('early_era', 'med_hp', 10, 'Early era: Some higher power'),

    ('v10_era', 'high_hp', 40, 'V10 era: ~850 HP peak'),
    ('v10_era', 'med_hp', 15, 'V10 era: Early development'),

    ('v8_era', 'med_hp', 35, 'V8 era: ~750 HP regulated'),
    ('v8_era', 'high_hp', 10, 'V8 era: Peak performance'),

    ('hybrid_era', 'ultra_hp', 45, 'Hybrid era: 1000+ HP total'),
    ('hybrid_era', 'high_hp', 10, 'Hybrid era: ICE component'),
]

# The paradox: the V10-era power band feeds the champions, the hybrid band mostly "competitive"
POWER_PERFORMANCE_LINKS = [
    ('low_hp', 'competitive', 15, 'Low power: Still competitive in era'),
    ('low_hp', 'midfield', 20, 'Low power: Mostly midfield'),
    ('low_hp', 'backmarkers', 10, 'Low power: Some backmarkers'),

    ('med_hp', 'champions', 15, 'Medium power: Championship capable'),
    ('med_hp', 'competitive', 25, 'Medium power: Very competitive'),
    ('med_hp', 'midfield', 15, 'Medium power: Solid midfield'),

    ('high_hp', 'champions', 35, '🏆 PARADOX: V10 era champions & lap records!'),
    ('high_hp', 'competitive', 20, 'High power: Very competitive'),

    ('ultra_hp', 'champions', 20, 'Ultra power: Some champions'),
    ('ultra_hp', 'competitive', 25, '⚠️ PARADOX: Most power, but regulated performance!'),
]


# ==========================================
# 3. ANALYSIS
# ==========================================

def analyze_constructors(races: pd.DataFrame, constructors: pd.DataFrame, constructor_results: pd.DataFrame,
                         min_results=50, limit=8) -> ConstructorAnalysis:
    """
    Participation, per-era race counts and average points for every constructor,
    plus the 'major' teams: more than `min_results` result rows, top `limit` by volume.
    """
    results = constructor_results.copy() if not constructor_results.empty else pd.DataFrame(
        columns=['raceId', 'constructorId', 'points'])
    for col in ('raceId', 'constructorId'):
        if col not in results.columns: results[col] = None
        results[col] = canonical_keys(results[col])
    if 'points' not in results.columns: results['points'] = 0
    results['points'] = pd.to_numeric(results['points'], errors='coerce').fillna(0)
    results = results[results['constructorId'].notna()]

    # 1. Participation = number of result rows
    participation = results['constructorId'].value_counts()

    # 2. Major constructors (stable sort keeps table order on ties)
    if constructors.empty or 'constructorId' not in constructors.columns:
        majors = pd.DataFrame(columns=['constructorId', 'name', 'participation'])
    else:
        majors = constructors.copy()
        majors['constructorId'] = canonical_keys(majors['constructorId'])
        if 'name' not in majors.columns: majors['name'] = majors['constructorId'].astype(str)
        majors['participation'] = majors['constructorId'].map(participation).fillna(0).astype(int)
        majors = majors[majors['participation'] > min_results]
        majors = majors.sort_values('participation', ascending=False, kind='mergesort').head(limit)
        majors = majors.reset_index(drop=True)

    # 3. Per-era race counts through the race calendar
    era_counts = pd.DataFrame(columns=list(ERAS), dtype=int)
    if not races.empty and {'raceId', 'year'} <= set(races.columns) and not results.empty:
        calendar = pd.DataFrame({
            'raceId': canonical_keys(races['raceId']),
            'year': pd.to_numeric(races['year'], errors='coerce'),
        }).dropna(subset=['raceId', 'year'])
        calendar['era'] = calendar['year'].astype(int).map(classify_era)
        joined = results[['raceId', 'constructorId']].merge(calendar[['raceId', 'era']], on='raceId', how='inner')
        if not joined.empty:
            era_counts = (joined.groupby(['constructorId', 'era']).size()
                          .unstack(fill_value=0)
                          .reindex(columns=list(ERAS), fill_value=0))

    # 4. Average points per result row
    performance = results.groupby('constructorId')['points'].agg(totalPoints='sum', raceCount='size')
    performance['avgPoints'] = performance['totalPoints'] / performance['raceCount']

    return ConstructorAnalysis(major_constructors=majors, era_counts=era_counts, performance=performance)


def build_constructor_flow(races: pd.DataFrame, constructors: pd.DataFrame, constructor_results: pd.DataFrame,
                           min_results=50, limit=8, scale=3.0) -> FlowGraph:
    """
    Four-stage flow graph: constructor -> era -> power band -> performance category.

    Constructor -> era weights are sqrt(races in era) * scale so long-lived teams
    do not swamp the picture. The later stages use the fixed link tables above.
    """
    analysis = analyze_constructors(races, constructors, constructor_results,
                                    min_results=min_results, limit=limit)
    majors = analysis.major_constructors
    if majors.empty:
        logger.info("No major constructors found, nothing to draw")
        return FlowGraph()

    logger.info(f"Major constructors: {list(majors['name'])}")

    # Stage 1: Constructors
    nodes = [
        FlowNode(id=f"constructor_{row['constructorId']}", name=row['name'], stage=STAGE_CONSTRUCTOR,
                 color=CONSTRUCTOR_COLORS.get(row['name'], DEFAULT_CONSTRUCTOR_COLOR),
                 constructor_id=row['constructorId'])
        for row in majors.to_dict('records')
    ]

    # Stage 2: Engine eras
    for era in ERAS:
        info = ENGINE_ERAS[era]
        nodes.append(FlowNode(id=f"{era}_era", name=f"{info['name']}\n({info['start']}-{info['end']})",
                              stage=STAGE_ERA, color=info['color'], avg_hp=info['avg_hp']))

    # Stage 3 + 4: Power bands, performance categories
    nodes += [FlowNode(id=i, name=n, stage=STAGE_POWER, color=c) for i, n, c in POWER_NODES]
    nodes += [FlowNode(id=i, name=n, stage=STAGE_PERFORMANCE, color=c) for i, n, c in PERFORMANCE_NODES]

    links = []
    for row in majors.to_dict('records'):
        cid = row['constructorId']
        if cid not in analysis.era_counts.index: continue
        counts = analysis.era_counts.loc[cid]
        for era in ERAS:
            n_races = int(counts[era])
            if n_races > 0:
                links.append(FlowLink(
                    source=f"constructor_{cid}",
                    target=f"{era}_era",
                    value=float(np.sqrt(n_races) * scale),
                    description=f"{row['name']}: {n_races} races in {ERA_LINK_LABELS[era]} era",
                ))

    links += [FlowLink(s, t, v, d) for s, t, v, d in ERA_POWER_LINKS]
    links += [FlowLink(s, t, v, d) for s, t, v, d in POWER_PERFORMANCE_LINKS]

    return FlowGraph(nodes=nodes, links=links)
