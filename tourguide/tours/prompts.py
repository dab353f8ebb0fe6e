# tourguide/tours/prompts.py

from __future__ import annotations

import json

from tourguide.config import DEFAULT_STARTING_LOCATION
from tourguide.tours.models import (
    AssignmentRequest,
    OptimizationRequest,
    TourConfiguration,
    TourPreferences,
    TourRecord,
)


TOUR_SYSTEM_PROMPT = (
    "You are an expert tour guide AI agent. Create detailed, engaging tour "
    "itineraries based on user preferences. Include specific locations, timing, "
    "descriptions, and helpful tips. Always answer with a single valid JSON object."
)

LOCATION_SYSTEM_PROMPT = (
    "You are a knowledgeable travel expert. Provide detailed information about "
    "locations including history, culture, best times to visit, and insider tips."
)

ADVISOR_SYSTEM_PROMPT = (
    "You are a personalized travel advisor. Create tailored recommendations "
    "based on user preferences."
)


def _line(label: str, values) -> str:
    """'LABEL: a, b' ou chaîne vide si rien à dire."""
    if not values:
        return ""
    if isinstance(values, (list, tuple)):
        values = ", ".join(values)
    return f"{label}: {values}"


def build_tour_prompt(config: TourConfiguration) -> str:
    """
    Construire un prompt explicite demandant une sortie JSON strictement formatée.
    """
    vehicle_details = []
    for v in config.vehicles:
        equipment = (
            f" (Equipment: {', '.join(v.special_equipment)})" if v.special_equipment else ""
        )
        driver = "included" if v.driver_included else "not included"
        vehicle_details.append(
            f"{v.type.value} ({v.occupants}/{v.capacity} people, driver {driver}{equipment})"
        )

    locations = []
    for loc in sorted(config.location_preferences, key=lambda l: l.priority, reverse=True):
        altitude = f" ({loc.altitude:g}m altitude)" if loc.altitude else ""
        activities = f" - Activities: {', '.join(loc.activities)}" if loc.activities else ""
        region = loc.region.value if loc.region else "region"
        locations.append(
            f"{loc.name} in {region} (Priority: {loc.priority}/10, "
            f"Time: {loc.min_time:g}-{loc.max_time:g}h{altitude}){activities}"
        )

    c = config.configuration
    season = (
        f"SEASONAL FOCUS: {config.season} - Consider weather, accessibility, "
        "seasonal activities, and road conditions"
        if config.season
        else ""
    )
    accommodation = (
        f"- Accommodation style: {config.accommodation_type.value}"
        if config.accommodation_type
        else ""
    )

    extras = "\n".join(
        line
        for line in (
            _line("CULTURAL INTERESTS", config.interests),
            _line("GROUP AGE RANGE", config.age_range),
            _line("DIETARY NEEDS", config.dietary_requirements),
            _line("ALTITUDE CONCERNS", config.altitude_concerns),
            _line("PREFERRED LANGUAGES", config.language_preferences),
            _line("TRADITIONAL ACTIVITIES", config.traditional_activities),
            _line("PHOTOGRAPHY FOCUS", config.photography_interests),
            _line("SPECIAL REQUIREMENTS", config.special_requirements),
        )
        if line
    )

    prompt = f"""
Create a comprehensive {config.duration}-day {config.tour_type.value} tour in KYRGYZSTAN, focusing on {config.primary_region.value} region.

KYRGYZSTAN TOUR LOGISTICS:
- Total participants: {config.total_participants} people
- Transport: {', '.join(vehicle_details)}
- Budget: {config.budget:g} USD
- Starting point: {config.starting_location or DEFAULT_STARTING_LOCATION}
{accommodation}
{season}

PRIORITY LOCATIONS IN KYRGYZSTAN:
{', '.join(locations) or 'No specific locations requested'}

TOUR CONFIGURATION:
- Mobility/Fitness Level: {c.mobility_level}/10 (1=limited mobility, 10=very fit for mountain activities)
- Adventure Level: {c.adventure_level}/10 (1=comfort focused, 10=extreme adventure)
- Cultural Immersion: {c.cultural_immersion}/10 (nomadic culture, traditions)
- Nature/Wildlife Focus: {c.nature_focus}/10
- Traditional Experience: {c.traditional_experience}/10 (yurt stays, horseback riding, traditional crafts)
- Budget Flexibility: {c.budget_flexibility}/10

{extras}

KYRGYZSTAN-SPECIFIC CONSIDERATIONS:
- Include authentic Kyrgyz experiences (yurt stays, traditional meals, horse trekking)
- Consider mountain road conditions and accessibility
- Include altitude acclimatization time if needed
- Include traditional foods: beshbarmak, lagman, manti, kumys
- Include currency information (Kyrgyz som) and payment methods
- Safety considerations for mountain/remote areas

RESPONSE FORMAT (JSON only, no text outside the JSON):
{{
  "title": "Kyrgyzstan tour name",
  "duration": "{config.duration} days",
  "difficulty": "Easy | Medium | Hard",
  "highlights": ["key attractions and experiences"],
  "itinerary": [
    {{
      "time": "09:00",
      "location": "location name",
      "description": "Detailed description with cultural context",
      "tips": ["practical tips"],
      "duration": "2 hours",
      "vehicle_instructions": "Transport coordination",
      "group_distribution": "Group management for activities",
      "estimated_cost": 0
    }}
  ],
  "vehicle_assignments": [
    {{"vehicle_id": "vehicle-1", "vehicle_type": "suv_4wd", "occupants": 4, "route": "..."}}
  ],
  "recommendations": ["..."],
  "budget_breakdown": {{"transportation": 0, "accommodation": 0, "meals": 0, "activities": 0, "miscellaneous": 0}},
  "logistics_notes": ["..."],
  "emergency_contacts": ["..."]
}}
"""
    return prompt


def build_assignment_prompt(request: AssignmentRequest) -> str:
    participants = json.dumps(
        [p.model_dump() for p in request.participants], indent=2, ensure_ascii=False
    )
    vehicles = json.dumps(
        [v.model_dump() for v in request.vehicles], indent=2, ensure_ascii=False
    )
    return f"""Generate optimal vehicle assignments:

PARTICIPANTS: {participants}
VEHICLES: {vehicles}
DESTINATIONS: {', '.join(request.destinations) or 'Not specified'}

Consider compatibility, mobility needs, preferences, and vehicle features.
Every participant must get exactly one seat. Answer in JSON:
{{"assignments": [{{"participant_name": "...", "vehicle_index": 0, "vehicle_type": "...", "seat_number": 1}}], "reasoning": "..."}}"""


def build_optimization_prompt(tour: TourRecord, request: OptimizationRequest) -> str:
    conditions = request.current_conditions
    prefs = request.preferences
    current_tour = tour.model_dump_json(indent=2, exclude={"configuration"})
    return f"""Optimize this tour based on current conditions and preferences:

CURRENT TOUR: {current_tour}

CURRENT CONDITIONS:
- Weather: {conditions.weather}
- Traffic: {conditions.traffic}
- Events: {conditions.events}
- Time constraints: {conditions.time_constraints}

PREFERENCES:
- Priority changes: {prefs.priority_changes}
- New constraints: {prefs.new_constraints}

Provide optimization suggestions and alternative routes in JSON format:
{{"suggestions": "...", "alternativeRoutes": [{{"name": "...", "stops": ["..."]}}]}}"""


def build_location_prompt(location: str) -> str:
    return f"Tell me about {location} as a travel destination."


def build_recommendations_prompt(preferences: TourPreferences) -> str:
    lines = [
        "Based on these preferences, suggest personalized travel recommendations:",
        f"- Budget: {preferences.budget}",
        f"- Interests: {', '.join(preferences.interests)}",
        f"- Travel style: {preferences.travel_style}",
        f"- Duration: {preferences.duration}",
        f"- Group size: {preferences.group_size}",
    ]
    if preferences.destination:
        lines.append(f"- Destination: {preferences.destination}")
    return "\n".join(lines)


def build_alternatives_prompt(tour: TourRecord, location: str) -> str:
    return (
        f"Based on this tour in {tour.destination}, suggest 5 alternative locations "
        f"to {location} that would fit the same time slot and tour theme. "
        f"Consider the tour type: {tour.title}. One location per line."
    )
