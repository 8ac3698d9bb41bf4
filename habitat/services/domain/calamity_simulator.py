"""
Domain service: Calamity impact simulation.

Projects how a hypothetical calamity (drought, flood, heat wave, frost, pest
outbreak or mineral depletion) would affect a set of planted species and the
site metrics, and suggests mitigation steps.

Per species:
    mortality = sensitivity * severity * area * (1 + duration_factor * 0.5)
    survival  = max(5, 100 * (1 - mortality))
    growth    = min(95, 120 * mortality)
    recovery  = duration / recovery_rate * (1 + severity)

where severity and area are fractions (0-1) and duration_factor is the
duration in months over 12, capped at 1.
"""
from dataclasses import dataclass
from typing import Dict, List, Sequence

from habitat.domain.models import (
    CalamityScenario,
    CalamityType,
    MetricsImpact,
    SimulationResult,
    SpeciesImpact,
)
from habitat.utils.rounding import round_half_up


@dataclass(frozen=True)
class SpeciesSensitivity:
    """Vulnerability (0-1) of a species to each calamity, plus how fast it recovers."""
    drought: float
    flood: float
    heat: float
    frost: float
    pest: float
    mineral_dependency: float
    recovery_rate: float

    def for_calamity(self, calamity: CalamityType) -> float:
        return {
            CalamityType.DROUGHT: self.drought,
            CalamityType.FLOOD: self.flood,
            CalamityType.HEAT_WAVE: self.heat,
            CalamityType.FROST: self.frost,
            CalamityType.PEST_OUTBREAK: self.pest,
            CalamityType.MINERAL_DEPLETION: self.mineral_dependency,
        }[calamity]


SENSITIVITIES: Dict[str, SpeciesSensitivity] = {
    "Neem": SpeciesSensitivity(0.1, 0.4, 0.15, 0.7, 0.1, 0.2, 0.8),
    "Banyan": SpeciesSensitivity(0.35, 0.3, 0.25, 0.6, 0.2, 0.35, 0.6),
    "Teak": SpeciesSensitivity(0.6, 0.5, 0.4, 0.5, 0.3, 0.5, 0.5),
    "Mango": SpeciesSensitivity(0.45, 0.4, 0.3, 0.7, 0.4, 0.4, 0.55),
    "Bamboo": SpeciesSensitivity(0.5, 0.2, 0.35, 0.8, 0.15, 0.3, 0.9),
    "Jamun": SpeciesSensitivity(0.2, 0.35, 0.2, 0.65, 0.25, 0.3, 0.7),
    "Eucalyptus": SpeciesSensitivity(0.3, 0.6, 0.25, 0.4, 0.35, 0.45, 0.75),
    "Indian Rosewood": SpeciesSensitivity(0.25, 0.45, 0.2, 0.55, 0.3, 0.35, 0.65),
    "Sal": SpeciesSensitivity(0.5, 0.35, 0.35, 0.45, 0.25, 0.4, 0.5),
}
# Used for species missing from the table
DEFAULT_SENSITIVITY = SpeciesSensitivity(0.4, 0.4, 0.3, 0.5, 0.3, 0.4, 0.6)

MIN_SURVIVAL_RATE = 5
MAX_GROWTH_IMPACT = 95
LOW_SURVIVAL_THRESHOLD = 50
EMERGENCY_IRRIGATION_SEVERITY = 60
EMERGENCY_RESPONSE_SEVERITY = 70

MITIGATIONS: Dict[CalamityType, List[str]] = {
    CalamityType.DROUGHT: [
        "Implement drip irrigation systems to conserve water",
        "Apply mulching to reduce soil moisture evaporation",
    ],
    CalamityType.FLOOD: [
        "Improve drainage systems around plantation areas",
        "Create water channels to redirect excess water",
    ],
    CalamityType.HEAT_WAVE: [
        "Install shade structures for vulnerable seedlings",
        "Increase irrigation frequency during peak heat",
    ],
    CalamityType.FROST: [
        "Use frost cloth covering for young plants",
        "Apply anti-transpirant sprays before frost events",
    ],
    CalamityType.PEST_OUTBREAK: [
        "Deploy pheromone traps for early detection",
        "Consider biological pest control agents",
    ],
    CalamityType.MINERAL_DEPLETION: [
        "Conduct soil testing and apply targeted fertilizers",
        "Implement crop rotation or companion planting",
    ],
}
EMERGENCY_IRRIGATION = "Consider emergency irrigation from alternative water sources"
EMERGENCY_RESPONSE = [
    "Activate emergency response protocols",
    "Prepare for potential replanting in severely affected areas",
]


def sensitivity_for(species: str) -> SpeciesSensitivity:
    return SENSITIVITIES.get(species, DEFAULT_SENSITIVITY)


def _duration_factor(duration_months: float) -> float:
    return min(1.0, duration_months / 12)


def simulate_species(species: str, scenario: CalamityScenario) -> SpeciesImpact:
    """Project the impact of a scenario on one species."""
    sensitivity = sensitivity_for(species)
    severity = scenario.severity / 100
    area = scenario.affected_area / 100

    mortality = (
        sensitivity.for_calamity(scenario.type) * severity * area
        * (1 + _duration_factor(scenario.duration) * 0.5)
    )

    return SpeciesImpact(
        species=species,
        survival_rate=max(MIN_SURVIVAL_RATE, round_half_up((1 - mortality) * 100)),
        growth_impact=round_half_up(min(MAX_GROWTH_IMPACT, mortality * 120)),
        recovery_time=round_half_up(
            scenario.duration * (1 / sensitivity.recovery_rate) * (1 + severity)
        ),
        drought_tolerance=round_half_up((1 - sensitivity.drought) * 100),
        mineral_sensitivity=round_half_up(sensitivity.mineral_dependency * 100),
    )


def metrics_impact(
    scenario: CalamityScenario,
    species_impact: Sequence[SpeciesImpact],
) -> MetricsImpact:
    """
    Expected change of site metrics in percentage points.

    Carbon capture drops with the average mortality across species.
    """
    severity = scenario.severity / 100
    area = scenario.affected_area / 100
    average_survival = (
        sum(impact.survival_rate for impact in species_impact) / max(1, len(species_impact))
    )

    if scenario.type == CalamityType.DROUGHT:
        moisture = -round_half_up(severity * 50)
    elif scenario.type == CalamityType.FLOOD:
        moisture = round_half_up(severity * 30)
    else:
        moisture = -round_half_up(severity * 20)

    soil_factor = 60 if scenario.type == CalamityType.MINERAL_DEPLETION else 20

    return MetricsImpact(
        ndvi=-round_half_up(severity * area * 40),
        moisture=moisture,
        soil_health=-round_half_up(severity * soil_factor),
        carbon_capture=-round_half_up((100 - average_survival) * 0.8),
    )


def recommendations(
    scenario: CalamityScenario,
    species_impact: Sequence[SpeciesImpact],
) -> List[str]:
    steps = []

    vulnerable = [
        impact.species for impact in species_impact
        if impact.survival_rate < LOW_SURVIVAL_THRESHOLD
    ]
    if vulnerable:
        steps.append(
            f"Consider replacing {', '.join(vulnerable)} with more resilient alternatives"
        )

    steps.extend(MITIGATIONS[scenario.type])
    if scenario.type == CalamityType.DROUGHT and scenario.severity > EMERGENCY_IRRIGATION_SEVERITY:
        steps.append(EMERGENCY_IRRIGATION)

    if scenario.severity > EMERGENCY_RESPONSE_SEVERITY:
        steps.extend(EMERGENCY_RESPONSE)

    return steps


def run_simulation(scenario: CalamityScenario, species: Sequence[str]) -> SimulationResult:
    """
    Simulate a calamity over the planted species.

    Args:
        scenario: Calamity type, severity, affected area and duration
        species: Names of the planted species; unknown names use default sensitivities

    Returns:
        SimulationResult with per-species impact (in input order), metric
        deltas and recommended actions
    """
    species_impact = [simulate_species(name, scenario) for name in species]
    return SimulationResult(
        scenario=scenario,
        species_impact=species_impact,
        metrics_impact=metrics_impact(scenario, species_impact),
        recommendations=recommendations(scenario, species_impact),
    )
