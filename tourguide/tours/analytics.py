# tourguide/tours/analytics.py

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from tourguide.errors import DivisionDomainError, MalformedDurationError
from tourguide.tours.models import (
    CostAnalysis,
    EfficiencyMetrics,
    GeneratedTour,
    Stop,
    TimeAnalysis,
    TourAnalytics,
    TourDraft,
    TourSummary,
    VehicleAssignment,
    WeatherConditions,
    WeatherImpact,
)
from tourguide.tours.parsing import parse_duration_days, parse_stop_hours

# Capacité de référence d'un véhicule pour le taux d'occupation
REFERENCE_VEHICLE_CAPACITY = 8
TRAVEL_HOURS_PER_STOP = 0.5

# (seuil coût/personne/jour, score) ; au-delà du dernier seuil -> 1
BUDGET_EFFICIENCY_STEPS = (
    (100, 10),
    (200, 9),
    (300, 8),
    (400, 7),
    (500, 6),
    (700, 4),
    (1000, 2),
)

OUTDOOR_DESCRIPTION_WORDS = ("outdoor", "park")
OUTDOOR_LOCATION_WORDS = ("garden",)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# ---------- Coûts ----------

def cost_per_person(tour: GeneratedTour) -> float:
    if tour.total_participants == 0:
        raise DivisionDomainError("cost_per_person", "Tour has no participants")
    return tour.total_budget / tour.total_participants


def _duration_days(tour: GeneratedTour, metric: str) -> int:
    days = parse_duration_days(tour.duration)
    if days <= 0:
        raise DivisionDomainError(metric, f"Tour duration {tour.duration!r} is not a positive number of days")
    return days


def cost_per_day(tour: GeneratedTour) -> float:
    return tour.total_budget / _duration_days(tour, "cost_per_day")


# ---------- Temps ----------

def average_stop_duration(itinerary: Sequence[Stop]) -> float:
    """Moyenne des durées d'étape, en heures, arrondie à 0.1."""
    if not itinerary:
        return 0.0
    total = sum(parse_stop_hours(stop.duration) for stop in itinerary)
    return round_half_up(total / len(itinerary), 1)


def total_travel_time(itinerary: Sequence[Stop]) -> float:
    return len(itinerary) * TRAVEL_HOURS_PER_STOP


def active_time(itinerary: Sequence[Stop]) -> float:
    return sum(parse_stop_hours(stop.duration) for stop in itinerary)


# ---------- Efficacité ----------

def locations_per_day(tour: GeneratedTour) -> float:
    return len(tour.itinerary) / _duration_days(tour, "locations_per_day")


def budget_efficiency_score(tour: GeneratedTour) -> int:
    days = _duration_days(tour, "budget_efficiency")
    if tour.total_participants == 0:
        raise DivisionDomainError("budget_efficiency", "Tour has no participants")

    cost_per_person_per_day = tour.total_budget / (tour.total_participants * days)
    for threshold, score in BUDGET_EFFICIENCY_STEPS:
        if cost_per_person_per_day <= threshold:
            return score
    return 1


def time_efficiency_score(per_day: float) -> int:
    """Rythme idéal : 3 à 5 lieux par jour."""
    if 3 <= per_day <= 5:
        return 10
    if 2 <= per_day < 3:
        return 8
    if 5 < per_day <= 6:
        return 8
    if 1 <= per_day < 2:
        return 6
    if 6 < per_day <= 8:
        return 6
    if per_day > 8:
        return 3
    return 1


def vehicle_utilization_score(assignments: Sequence[VehicleAssignment]) -> int:
    if not assignments:
        return 0
    total = sum(
        min(a.occupants / REFERENCE_VEHICLE_CAPACITY, 1.0) * 100 for a in assignments
    )
    return int(round_half_up(total / len(assignments)))


def efficiency_suggestions(
    budget_efficiency: Optional[int],
    time_efficiency: Optional[int],
    per_day: Optional[float],
    vehicle_utilization: int,
) -> List[str]:
    suggestions = []

    if budget_efficiency is not None and budget_efficiency < 6:
        suggestions.append("Consider reducing accommodation costs or finding group discounts")
        suggestions.append("Look for free activities and attractions")

    if time_efficiency is not None and time_efficiency < 6:
        if per_day is not None and per_day > 6:
            suggestions.append("Reduce the number of locations per day for a more relaxed pace")
        else:
            suggestions.append("Add more activities to make better use of your time")

    if vehicle_utilization < 70:
        suggestions.append("Consider consolidating to fewer vehicles to reduce costs")

    if not suggestions:
        suggestions.append("Your tour is well-optimized!")
        suggestions.append("Consider adding backup activities for bad weather")

    return suggestions


def analyze_tour(tour: GeneratedTour) -> TourAnalytics:
    """
    Calcule toutes les métriques d'un circuit.
    Une métrique non calculable (0 participant, durée illisible) vaut None et
    son nom est listé dans `not_computable`.
    """
    not_computable: List[str] = []

    def attempt(name, compute):
        try:
            return compute()
        except (DivisionDomainError, MalformedDurationError):
            not_computable.append(name)
            return None

    per_day = attempt("locations_per_day", lambda: locations_per_day(tour))
    budget_efficiency = attempt("budget_efficiency", lambda: budget_efficiency_score(tour))
    time_efficiency = time_efficiency_score(per_day) if per_day is not None else None
    if time_efficiency is None:
        not_computable.append("time_efficiency")
    utilization = vehicle_utilization_score(tour.vehicle_assignments)

    cost = CostAnalysis(
        total_budget=tour.total_budget,
        budget_breakdown=tour.budget_breakdown,
        cost_per_person=attempt("cost_per_person", lambda: cost_per_person(tour)),
        cost_per_day=attempt("cost_per_day", lambda: cost_per_day(tour)),
    )
    time = TimeAnalysis(
        total_duration=tour.duration,
        average_stop_duration=average_stop_duration(tour.itinerary),
        travel_time=total_travel_time(tour.itinerary),
        active_time=active_time(tour.itinerary),
    )
    metrics = EfficiencyMetrics(
        locations_per_day=per_day,
        budget_efficiency=budget_efficiency,
        time_efficiency=time_efficiency,
        vehicle_utilization=utilization,
    )

    return TourAnalytics(
        cost_analysis=cost,
        time_analysis=time,
        efficiency_metrics=metrics,
        suggestions=efficiency_suggestions(budget_efficiency, time_efficiency, per_day, utilization),
        not_computable=not_computable,
    )


# ---------- Résumé / météo ----------

def summarize_tour(tour: TourDraft) -> TourSummary:
    try:
        per_person = f"{int(round_half_up(cost_per_person(tour)))} per person"
    except DivisionDomainError:
        per_person = "n/a per person"

    return TourSummary(
        overview=(
            f"{tour.duration} {tour.title} in {tour.destination} "
            f"for {tour.total_participants} participants"
        ),
        key_highlights=list(tour.highlights),
        logistics_overview=(
            f"{len(tour.vehicle_assignments)} vehicles coordinated across "
            f"{len(tour.itinerary)} locations"
        ),
        budget_summary=f"Total budget: {tour.total_budget:g} ({per_person})",
    )


def is_outdoor_stop(stop: Stop) -> bool:
    description = stop.description.lower()
    location = stop.location.lower()
    return any(w in description for w in OUTDOOR_DESCRIPTION_WORDS) or any(
        w in location for w in OUTDOOR_LOCATION_WORDS
    )


def estimate_weather_impact(tour: GeneratedTour, conditions: WeatherConditions) -> WeatherImpact:
    """Étapes en extérieur exposées à la météo + alternatives génériques."""
    recommendations = [
        "Check weather forecast daily",
        "Have indoor backup plans",
        "Bring appropriate weather gear",
    ]
    if conditions.condition != "Unknown":
        recommendations.append(f"Expected conditions: {conditions.condition}")

    return WeatherImpact(
        affected_activities=[s.location for s in tour.itinerary if is_outdoor_stop(s)],
        alternatives=["Indoor museums", "Shopping centers", "Cultural centers"],
        recommendations=recommendations,
    )
