# tourguide/tours/assignments.py

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import List, Sequence

from pydantic import ValidationError

from tourguide.config import DEFAULT_STARTING_LOCATION
from tourguide.errors import CapacityExhaustedError, DelegateError, ParseError
from tourguide.llm.client import GenerativeDelegate
from tourguide.tours.models import (
    AssignmentPlan,
    AssignmentRequest,
    Participant,
    SeatAssignment,
    TourConfiguration,
    VehicleAssignment,
    VehicleOption,
)
from tourguide.tours.parsing import load_json_object
from tourguide.tours.prompts import ADVISOR_SYSTEM_PROMPT, build_assignment_prompt

log = logging.getLogger(__name__)

UNKNOWN_VEHICLE_TYPE = "Unknown"
FALLBACK_REASONING = "Automatic assignment based on capacity and basic preferences"
DEFAULT_REASONING = "Standard assignment based on capacity"


# ---------- Remplissage glouton ----------

def assign_by_capacity(
    participants: Sequence[Participant],
    vehicles: Sequence[VehicleOption],
    strict: bool = False,
) -> List[SeatAssignment]:
    """
    Affecte les participants dans l'ordre, véhicule par véhicule.

    On remplit le véhicule courant jusqu'à sa capacité puis on passe au
    suivant. Au-delà du dernier véhicule déclaré, tout le monde va dans un
    véhicule de débordement (type "Unknown", places non bornées), sauf en
    mode strict où l'on lève CapacityExhaustedError.
    """
    if strict:
        ensure_capacity(participants, vehicles)

    assignments: List[SeatAssignment] = []
    vehicle_index = 0
    occupants = 0

    for participant in participants:
        if occupants >= _capacity_at(vehicles, vehicle_index):
            vehicle_index += 1
            occupants = 0

        if vehicle_index < len(vehicles):
            vehicle_type = vehicles[vehicle_index].type
        else:
            vehicle_type = UNKNOWN_VEHICLE_TYPE

        assignments.append(
            SeatAssignment(
                participant_name=participant.name,
                vehicle_index=vehicle_index,
                vehicle_type=vehicle_type,
                seat_number=occupants + 1,
            )
        )
        occupants += 1

    return assignments


def _capacity_at(vehicles: Sequence[VehicleOption], index: int) -> float:
    if index < len(vehicles):
        return vehicles[index].capacity
    return math.inf


def ensure_capacity(
    participants: Sequence[Participant], vehicles: Sequence[VehicleOption]
) -> None:
    capacity = sum(v.capacity for v in vehicles)
    if len(participants) > capacity:
        raise CapacityExhaustedError(len(participants), capacity)


# ---------- Affectation via le LLM, avec repli ----------

def generate_vehicle_assignments(
    request: AssignmentRequest, delegate: GenerativeDelegate
) -> AssignmentPlan:
    """
    Demande une affectation au LLM ; si l'appel échoue ou si la réponse
    n'affecte pas chaque participant, on retombe sur assign_by_capacity().
    """
    if request.strict:
        ensure_capacity(request.participants, request.vehicles)

    prompt = build_assignment_prompt(request)
    try:
        raw_text = delegate.generate(
            prompt,
            system=ADVISOR_SYSTEM_PROMPT,
            max_new_tokens=1500,
            temperature=0.8,
        )
        return _parse_assignment_plan(raw_text, request)
    except (DelegateError, ParseError) as e:
        log.warning("Generative vehicle assignment unavailable, using fallback: %s", e)

    return AssignmentPlan(
        assignments=assign_by_capacity(request.participants, request.vehicles),
        reasoning=FALLBACK_REASONING,
        source="fallback",
    )


def _parse_assignment_plan(raw_text: str, request: AssignmentRequest) -> AssignmentPlan:
    obj = load_json_object(raw_text)
    try:
        assignments = [
            SeatAssignment.model_validate(a) for a in obj.get("assignments") or []
        ]
    except (ValidationError, TypeError, AttributeError) as e:
        raise ParseError(f"Unexpected assignment structure: {e}") from e

    expected = Counter(p.name for p in request.participants)
    assigned = Counter(a.participant_name for a in assignments)
    if assigned != expected:
        missing = sorted((expected - assigned).elements())
        unknown = sorted((assigned - expected).elements())
        raise ParseError(
            "Model assignment does not seat every participant exactly once "
            f"(missing: {missing}, unexpected: {unknown})"
        )
    _check_seats(assignments, request.vehicles)

    reasoning = obj.get("reasoning")
    return AssignmentPlan(
        assignments=assignments,
        reasoning=reasoning if isinstance(reasoning, str) and reasoning else DEFAULT_REASONING,
        source="generative",
    )


def _check_seats(assignments: Sequence[SeatAssignment], vehicles: Sequence[VehicleOption]) -> None:
    """Véhicule déclaré, siège dans la capacité, jamais deux fois le même siège."""
    taken = set()
    for a in assignments:
        if a.vehicle_index >= len(vehicles):
            raise ParseError(f"Unknown vehicle index {a.vehicle_index} for {a.participant_name}")
        capacity = vehicles[a.vehicle_index].capacity
        if a.seat_number > capacity:
            raise ParseError(
                f"Seat {a.seat_number} exceeds capacity {capacity} of vehicle {a.vehicle_index}"
            )
        seat = (a.vehicle_index, a.seat_number)
        if seat in taken:
            raise ParseError(f"Seat {a.seat_number} of vehicle {a.vehicle_index} assigned twice")
        taken.add(seat)


# ---------- Affectations d'un circuit ----------

def assignments_from_configuration(config: TourConfiguration) -> List[VehicleAssignment]:
    """
    Une affectation par véhicule configuré, utilisée quand le circuit généré
    n'en contient aucune.
    """
    start = config.starting_location or DEFAULT_STARTING_LOCATION
    route = f"{start} -> {config.primary_region.value}"

    assignments = []
    for index, vehicle in enumerate(config.vehicles):
        assignments.append(
            VehicleAssignment(
                vehicle_id=f"vehicle-{index + 1}",
                vehicle_type=vehicle.type.value,
                occupants=vehicle.occupants,
                route=route,
                driver_notes="Driver included" if vehicle.driver_included else None,
            )
        )
    return assignments
