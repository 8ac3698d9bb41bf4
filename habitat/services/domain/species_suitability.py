"""
Domain service: Species suitability ranking.

Scores every species in the planting catalog against site temperature, soil
pH and rainfall, and ranks them best match first. Unlike the risk-driven
recommendations in advisory_composer, this ranking looks only at whether a
species can thrive on the site.
"""
from dataclasses import dataclass
from typing import List

from habitat.domain.models import SpeciesSuitability
from habitat.utils.rounding import round_half_up


@dataclass(frozen=True)
class SpeciesProfile:
    """Growing conditions and traits of a catalog species."""
    name: str
    scientific_name: str
    min_temp: float
    max_temp: float
    min_ph: float
    max_ph: float
    min_rainfall: float
    water_requirement: str
    carbon_capture: int
    growth_rate: str
    drought_tolerance: int


SPECIES_CATALOG: List[SpeciesProfile] = [
    SpeciesProfile("Teak", "Tectona grandis", 20, 35, 6.0, 7.5, 1200, "Medium", 45, "Medium", 65),
    SpeciesProfile("Neem", "Azadirachta indica", 15, 40, 5.5, 8.0, 400, "Low", 35, "Fast", 85),
    SpeciesProfile("Banyan", "Ficus benghalensis", 18, 38, 6.0, 7.5, 800, "Medium", 55, "Slow", 60),
    SpeciesProfile("Eucalyptus", "Eucalyptus globulus", 10, 35, 5.0, 7.0, 600, "High", 40, "Fast", 70),
    SpeciesProfile("Mango", "Mangifera indica", 20, 38, 5.5, 7.5, 750, "Medium", 38, "Medium", 55),
    SpeciesProfile("Indian Rosewood", "Dalbergia sissoo", 15, 40, 5.0, 8.0, 500, "Low", 42, "Fast", 75),
    SpeciesProfile("Bamboo", "Bambusa bambos", 15, 35, 5.5, 7.0, 1000, "High", 50, "Very Fast", 40),
    SpeciesProfile("Sal", "Shorea robusta", 18, 35, 5.5, 7.0, 1000, "Medium", 48, "Slow", 50),
]

# A site suitability of 50 leaves species scores unscaled; sites are ranked at 70
NEUTRAL_SITE_SUITABILITY = 50
BASE_SITE_SUITABILITY = 70

BASE_SCORE = 50
TEMPERATURE_MATCH_BONUS = 20
TEMPERATURE_PENALTY_PER_DEGREE = 2
PH_MATCH_BONUS = 15
PH_MISMATCH_PENALTY = 10
RAINFALL_MATCH_BONUS = 15
RAINFALL_PENALTY_PER_100MM = 1
MIN_SCORE = 20
MAX_SCORE = 95


def annual_rainfall(daily_rainfall: float) -> float:
    """Extrapolate a daily rainfall reading (mm) to a yearly total."""
    return daily_rainfall * 365


def score_species(
    profile: SpeciesProfile,
    temperature: float,
    soil_ph: float,
    rainfall: float,
    site_suitability: float = BASE_SITE_SUITABILITY,
) -> float:
    """
    Suitability of one species for a site, clamped to [20, 95].

    Args:
        profile: Catalog species
        temperature: Site temperature in °C
        soil_ph: Site soil pH
        rainfall: Daily rainfall in mm
        site_suitability: Overall site score; 50 is neutral, higher scales up

    Returns:
        Unrounded suitability score
    """
    score = BASE_SCORE

    if profile.min_temp <= temperature <= profile.max_temp:
        score += TEMPERATURE_MATCH_BONUS
    else:
        distance = min(abs(temperature - profile.min_temp), abs(temperature - profile.max_temp))
        score -= distance * TEMPERATURE_PENALTY_PER_DEGREE

    if profile.min_ph <= soil_ph <= profile.max_ph:
        score += PH_MATCH_BONUS
    else:
        score -= PH_MISMATCH_PENALTY

    annual = annual_rainfall(rainfall)
    if annual >= profile.min_rainfall:
        score += RAINFALL_MATCH_BONUS
    else:
        score -= (profile.min_rainfall - annual) / 100 * RAINFALL_PENALTY_PER_100MM

    score *= site_suitability / NEUTRAL_SITE_SUITABILITY
    return min(MAX_SCORE, max(MIN_SCORE, score))


def suitability_note(score: float) -> str:
    if score >= 80:
        return "Excellent match for local conditions"
    if score >= 65:
        return "Good choice with minor adaptations"
    if score >= 50:
        return "Viable but may need supplemental care"
    return "Consider alternatives for better results"


def rank_species(
    temperature: float,
    soil_ph: float,
    rainfall: float,
    site_suitability: float = BASE_SITE_SUITABILITY,
) -> List[SpeciesSuitability]:
    """
    Rank the whole catalog for a site, best match first.

    Ties keep catalog order.
    """
    ranked = []
    for profile in SPECIES_CATALOG:
        score = score_species(profile, temperature, soil_ph, rainfall, site_suitability)
        ranked.append(SpeciesSuitability(
            name=profile.name,
            scientific_name=profile.scientific_name,
            suitability=round_half_up(score),
            water_requirement=profile.water_requirement,
            carbon_capture=profile.carbon_capture,
            growth_rate=profile.growth_rate,
            drought_tolerance=profile.drought_tolerance,
            mineral_sensitivity=100 - profile.drought_tolerance,
            notes=suitability_note(score),
        ))
    ranked.sort(key=lambda species: species.suitability, reverse=True)
    return ranked
