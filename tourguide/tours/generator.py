# tourguide/tours/generator.py

from __future__ import annotations

import logging
import re
from typing import List

from tourguide.errors import ConfigurationError, DelegateError, ParseError
from tourguide.llm.client import GenerativeDelegate
from tourguide.tours.assignments import assignments_from_configuration
from tourguide.tours.models import (
    GeneratedTour,
    OptimizationRequest,
    OptimizationResult,
    TourConfiguration,
    TourDraft,
    TourPreferences,
    TourRecord,
    TourUpdate,
)
from tourguide.tours.parsing import interpret_tour_response, load_json_object
from tourguide.tours.prompts import (
    ADVISOR_SYSTEM_PROMPT,
    LOCATION_SYSTEM_PROMPT,
    TOUR_SYSTEM_PROMPT,
    build_alternatives_prompt,
    build_location_prompt,
    build_optimization_prompt,
    build_recommendations_prompt,
    build_tour_prompt,
)
from tourguide.tours.store import TourStore
from tourguide.tours.validation import validate_tour_configuration

log = logging.getLogger(__name__)

# Changer de région ou de type de circuit impose de régénérer le contenu
REGENERATING_FIELDS = ("primary_region", "tour_type")
# Champs dont dépendent les affectations dérivées de la configuration
FLEET_FIELDS = ("vehicles", "starting_location")

_LIST_NUMBERING = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")


# ---------- Génération ----------

def generate_tour_content(config: TourConfiguration, delegate: GenerativeDelegate) -> GeneratedTour:
    """
    Prompt -> LLM -> circuit interprété.
    DelegateError remonte ; une réponse illisible donne le circuit de secours.
    """
    prompt = build_tour_prompt(config)
    raw_text = delegate.generate(
        prompt,
        system=TOUR_SYSTEM_PROMPT,
        max_new_tokens=2000,
        temperature=0.7,
    )
    generated = interpret_tour_response(raw_text)

    if not generated.vehicle_assignments:
        generated.vehicle_assignments = assignments_from_configuration(config)
    return generated


def _tour_totals(config: TourConfiguration) -> dict:
    return {
        "destination": config.primary_region.value,
        "total_budget": config.budget,
        "total_participants": config.total_participants,
        "configuration": config,
    }


def create_tour(
    config: TourConfiguration, store: TourStore, delegate: GenerativeDelegate
) -> TourRecord:
    """
    Fonction principale exposée : valide, génère puis stocke un circuit.
    """
    validate_tour_configuration(config)

    generated = generate_tour_content(config, delegate)
    draft = TourDraft(**{**generated.model_dump(), **_tour_totals(config)})

    tour_id = store.create(draft)
    log.info("Tour %s created (%s, %s days)", tour_id, config.primary_region.value, config.duration)
    return store.get(tour_id)


def update_tour(
    tour_id: str,
    patch: TourUpdate,
    store: TourStore,
    delegate: GenerativeDelegate,
) -> TourRecord:
    """
    Applique un patch à la configuration du circuit.
    Si la région ou le type change, le contenu est régénéré par le LLM.
    """
    current = store.get(tour_id)
    # null = "pas de changement"
    sent = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}

    if current.configuration is None:
        raise ConfigurationError(
            "configuration", f"Tour {tour_id} has no stored configuration to update"
        )

    config = TourConfiguration.model_validate({**current.configuration.model_dump(), **sent})
    validate_tour_configuration(config)

    changes = _tour_totals(config)
    if any(field in sent for field in REGENERATING_FIELDS):
        generated = generate_tour_content(config, delegate)
        regenerated = generated.model_dump(exclude={"total_budget", "total_participants"})
        changes = {**regenerated, **changes}
    elif any(field in sent for field in FLEET_FIELDS) and (
        current.vehicle_assignments == assignments_from_configuration(current.configuration)
    ):
        # affectations dérivées de l'ancienne flotte : on les recalcule
        changes["vehicle_assignments"] = [
            a.model_dump() for a in assignments_from_configuration(config)
        ]

    updated = store.update(tour_id, changes)
    log.info("Tour %s updated (%s)", tour_id, ", ".join(sorted(sent)) or "no field")
    return updated


# ---------- Autres appels au LLM ----------

def optimize_tour_route(
    tour: TourRecord, request: OptimizationRequest, delegate: GenerativeDelegate
) -> OptimizationResult:
    prompt = build_optimization_prompt(tour, request)
    try:
        raw_text = delegate.generate(
            prompt, system=TOUR_SYSTEM_PROMPT, max_new_tokens=2000, temperature=0.7
        )
        obj = load_json_object(raw_text)
    except (DelegateError, ParseError) as e:
        log.warning("Route optimization unavailable for tour %s: %s", tour.id, e)
        return OptimizationResult(
            suggestions="Unable to generate optimizations at this time",
            alternative_routes=[],
        )

    suggestions = obj.get("suggestions")
    if isinstance(suggestions, list):
        suggestions = "\n".join(str(s) for s in suggestions)
    routes = obj.get("alternativeRoutes", obj.get("alternative_routes")) or []

    return OptimizationResult(
        suggestions=suggestions or "No specific optimizations needed",
        alternative_routes=[r for r in routes if isinstance(r, dict)] if isinstance(routes, list) else [],
    )


def get_location_info(location: str, delegate: GenerativeDelegate) -> str:
    return delegate.generate(
        build_location_prompt(location),
        system=LOCATION_SYSTEM_PROMPT,
        max_new_tokens=1000,
        temperature=0.6,
    )


def get_personalized_recommendations(
    preferences: TourPreferences, delegate: GenerativeDelegate
) -> str:
    return delegate.generate(
        build_recommendations_prompt(preferences),
        system=ADVISOR_SYSTEM_PROMPT,
        max_new_tokens=1500,
        temperature=0.8,
    )


def suggest_alternative_locations(
    tour: TourRecord, location: str, delegate: GenerativeDelegate
) -> List[str]:
    try:
        raw_text = delegate.generate(
            build_alternatives_prompt(tour, location),
            system=LOCATION_SYSTEM_PROMPT,
            max_new_tokens=1000,
            temperature=0.6,
        )
    except DelegateError as e:
        log.warning("Alternative locations unavailable: %s", e)
        return ["Alternative location suggestions unavailable"]

    lines = [line for line in raw_text.splitlines() if line.strip()]
    return [_LIST_NUMBERING.sub("", line).strip() for line in lines[:5]]
