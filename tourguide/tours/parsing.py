# tourguide/tours/parsing.py

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from tourguide.errors import MalformedDurationError, ParseError
from tourguide.tours.models import BudgetBreakdown, GeneratedTour, Stop

log = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_CODE_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*|\s*```\s*$")

DEFAULT_STOP_HOURS = 1.0


# ---------- Durées ----------

def parse_duration_days(duration: Optional[str]) -> int:
    """
    Nombre de jours = premier entier en tête de la durée.
    "5 days" -> 5, "3-day trek" -> 3, "Multi-day" -> MalformedDurationError.
    """
    match = _LEADING_INT.match(duration or "")
    if not match:
        raise MalformedDurationError(duration or "")
    return int(match.group(1))


def parse_stop_hours(duration: Optional[str]) -> float:
    """
    Durée d'une étape en heures = premier nombre en tête ("2 hours" -> 2.0).
    Illisible ou nulle -> 1.0.
    """
    match = _LEADING_FLOAT.match(duration or "")
    if not match:
        return DEFAULT_STOP_HOURS
    return float(match.group(1)) or DEFAULT_STOP_HOURS


# ---------- JSON ----------

def strip_code_fences(text: str) -> str:
    """```json {...} ``` -> {...}"""
    return _CODE_FENCE.sub("", text).strip()


def extract_json_from_text(text: str) -> Optional[str]:
    """
    Tente d'extraire le premier objet JSON complet trouvé dans `text`.
    Les accolades à l'intérieur des chaînes JSON sont ignorées.
    Renvoie la string JSON ou None.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start: i + 1]
    return None


def load_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse la réponse brute du LLM en dict.
    1) JSON direct (après retrait des blocs ```json)
    2) sinon premier objet {...} trouvé dans le texte
    Lève ParseError si rien d'exploitable.
    """
    cleaned = strip_code_fences(text or "")
    try:
        obj = json.loads(cleaned)
    except (ValueError, RecursionError):
        candidate = extract_json_from_text(cleaned)
        if candidate is None:
            raise ParseError("No JSON object found in the model response")
        try:
            obj = json.loads(candidate)
        except (ValueError, RecursionError) as e:
            raise ParseError(f"Invalid JSON in the model response: {e}") from e

    if not isinstance(obj, dict):
        raise ParseError(f"Expected a JSON object, got {type(obj).__name__}")
    return obj


# ---------- Interprétation d'un circuit ----------

def parse_tour_json(text: Optional[str]) -> GeneratedTour:
    """Convertit la réponse du LLM en GeneratedTour (Pydantic). Lève ParseError."""
    obj = load_json_object(text)
    try:
        return GeneratedTour.model_validate(obj)
    except ValidationError as e:
        raise ParseError(f"Unexpected tour structure: {e}") from e


def fallback_tour(raw_text: str) -> GeneratedTour:
    """Circuit minimal qui enveloppe le texte brut dans une seule étape."""
    return GeneratedTour(
        title="Custom Tour",
        duration="Multi-day",
        difficulty="Medium",
        highlights=["AI Generated Tour"],
        itinerary=[
            Stop(
                time="09:00",
                location="Starting Point",
                description=raw_text,
                tips=["Follow AI recommendations"],
                duration="1 day",
                vehicle_instructions="Standard vehicle coordination",
                group_distribution="Even distribution across vehicles",
                estimated_cost=0,
                accessibility="Standard accessibility",
                photo_opportunities=["Scenic viewpoints"],
            )
        ],
        vehicle_assignments=[],
        recommendations=["Check local weather", "Bring comfortable shoes"],
        total_budget=0,
        total_participants=0,
        budget_breakdown=BudgetBreakdown(),
        logistics_notes=["Basic tour logistics"],
    )


def interpret_tour_response(raw_text: Optional[str]) -> GeneratedTour:
    """
    Ne lève jamais : JSON valide -> GeneratedTour, sinon circuit de secours.
    """
    try:
        return parse_tour_json(raw_text)
    except ParseError as e:
        log.warning("LLM response is not a usable tour, using fallback: %s", e)
        return fallback_tour(raw_text or "")
