# tourguide/tours/models.py

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


# -----------------------------
# Enums (Kirghizistan)
# -----------------------------

class Region(str, Enum):
    BISHKEK_CHUY = "bishkek_chuy"
    ISSYK_KUL = "issyk_kul"
    NARYN = "naryn"
    TALAS = "talas"
    OSH_FERGHANA = "osh_ferghana"
    JALAL_ABAD = "jalal_abad"
    BATKEN = "batken"


class TourType(str, Enum):
    CULTURAL = "cultural"
    ADVENTURE = "adventure"
    NOMADIC_EXPERIENCE = "nomadic_experience"
    MOUNTAIN_TREKKING = "mountain_trekking"
    HISTORICAL = "historical"
    NATURE_WILDLIFE = "nature_wildlife"
    SILK_ROAD = "silk_road"
    PHOTOGRAPHY = "photography"
    WINTER_SPORTS = "winter_sports"
    CULINARY = "culinary"


class VehicleType(str, Enum):
    SEDAN = "sedan"
    SUV_4WD = "suv_4wd"
    MINIVAN = "minivan"
    MARSHRUTKA = "marshrutka"
    HORSES = "horses"
    HIKING = "hiking"
    JEEP_OFFROAD = "jeep_offroad"


class AccommodationType(str, Enum):
    HOTEL = "hotel"
    GUESTHOUSE = "guesthouse"
    YURT_CAMP = "yurt_camp"
    TRADITIONAL_HOMESTAY = "traditional_homestay"
    MOUNTAIN_LODGE = "mountain_lodge"
    CAMPING = "camping"


Difficulty = Literal["Easy", "Medium", "Hard"]


# -----------------------------
# Demande de circuit
# -----------------------------

class VehicleConfig(BaseModel):
    """
    Un moyen de transport du groupe.
    La cohérence occupants <= capacity est vérifiée par le Capacity Validator,
    pas ici, pour pouvoir nommer le véhicule fautif.
    """
    type: VehicleType
    occupants: int = Field(..., ge=1, le=25, description="Personnes transportées.")
    capacity: int = Field(..., ge=1, le=25, description="Places disponibles.")
    driver_included: Optional[bool] = None
    special_equipment: List[str] = Field(default_factory=list)


class LocationPreference(BaseModel):
    name: str = Field(..., min_length=1)
    region: Optional[Region] = None
    priority: int = Field(..., ge=1, le=10)
    min_time: float = Field(..., ge=0.5, le=72, description="Heures minimum sur place.")
    max_time: float = Field(..., ge=0.5, le=72, description="Heures maximum sur place.")
    altitude: Optional[float] = Field(default=None, description="Altitude en mètres.")
    activities: List[str] = Field(default_factory=list)


class PreferenceProfile(BaseModel):
    """Les six curseurs (1-10) de configuration du circuit."""
    mobility_level: int = Field(..., ge=1, le=10)
    adventure_level: int = Field(..., ge=1, le=10)
    cultural_immersion: int = Field(..., ge=1, le=10)
    nature_focus: int = Field(..., ge=1, le=10)
    traditional_experience: int = Field(..., ge=1, le=10)
    budget_flexibility: int = Field(..., ge=1, le=10)


class TourConfiguration(BaseModel):
    """
    Représente la demande utilisateur pour générer un circuit.

    - primary_region : région principale du Kirghizistan.
    - duration : nombre de jours (1-30).
    - budget : budget total en USD (200-20000).
    - vehicles : configuration des véhicules (peut être vide ici, le
      Capacity Validator refuse ensuite une liste vide).
    """
    primary_region: Region
    duration: int = Field(..., ge=1, le=30)
    tour_type: TourType
    budget: float = Field(..., ge=200, le=20000)
    vehicles: List[VehicleConfig] = Field(default_factory=list)
    location_preferences: List[LocationPreference] = Field(default_factory=list)
    configuration: PreferenceProfile

    accommodation_type: Optional[AccommodationType] = None
    starting_location: Optional[str] = None
    season: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    age_range: Optional[str] = None
    dietary_requirements: List[str] = Field(default_factory=list)
    language_preferences: List[str] = Field(default_factory=list)
    altitude_concerns: Optional[str] = None
    traditional_activities: List[str] = Field(default_factory=list)
    photography_interests: List[str] = Field(default_factory=list)
    special_requirements: Optional[str] = None

    @property
    def total_participants(self) -> int:
        return sum(v.occupants for v in self.vehicles)


class TourUpdate(BaseModel):
    """Patch partiel d'un circuit : seuls les champs envoyés sont appliqués."""
    primary_region: Optional[Region] = None
    duration: Optional[int] = Field(default=None, ge=1, le=30)
    tour_type: Optional[TourType] = None
    budget: Optional[float] = Field(default=None, ge=200, le=20000)
    vehicles: Optional[List[VehicleConfig]] = None
    location_preferences: Optional[List[LocationPreference]] = None
    configuration: Optional[PreferenceProfile] = None

    accommodation_type: Optional[AccommodationType] = None
    starting_location: Optional[str] = None
    season: Optional[str] = None
    interests: Optional[List[str]] = None
    age_range: Optional[str] = None
    dietary_requirements: Optional[List[str]] = None
    language_preferences: Optional[List[str]] = None
    altitude_concerns: Optional[str] = None
    traditional_activities: Optional[List[str]] = None
    photography_interests: Optional[List[str]] = None
    special_requirements: Optional[str] = None


# -----------------------------
# Circuit généré / stocké
# -----------------------------

# Le LLM répond parfois en camelCase ("vehicleInstructions") : on accepte les deux.
_LLM_PAYLOAD_CONFIG = ConfigDict(
    alias_generator=AliasGenerator(
        validation_alias=lambda name: AliasChoices(name, to_camel(name))
    ),
    coerce_numbers_to_str=True,
)

_NUMBER = re.compile(r"[-+]?\d+(?:\.\d+)?")


def _item_text(item):
    # {"name": "Police", "phone": "102"} -> "Police - 102"
    if isinstance(item, dict):
        return " - ".join(str(x) for x in item.values() if x not in (None, ""))
    return item


def _text_items(v):
    """Liste de textes tolérante : chaîne seule, objets, null."""
    if isinstance(v, str):
        return [v] if v.strip() else []
    if isinstance(v, list):
        return [_item_text(item) for item in v]
    return v


class Stop(BaseModel):
    """
    Étape du circuit.
    Les champs correspondent à ce que le LLM doit renvoyer dans le JSON.
    """
    model_config = _LLM_PAYLOAD_CONFIG

    time: str = ""
    location: str = ""
    description: str = ""
    tips: List[str] = Field(default_factory=list)
    duration: str = ""
    vehicle_instructions: Optional[str] = None
    group_distribution: Optional[str] = None
    estimated_cost: Optional[float] = None
    accessibility: Optional[str] = None
    photo_opportunities: Optional[List[str]] = None

    @field_validator("tips", mode="before")
    @classmethod
    def tips_as_list(cls, v):
        # "Prendre de l'eau" -> ["Prendre de l'eau"]
        return [] if v is None else _text_items(v)

    @field_validator("photo_opportunities", mode="before")
    @classmethod
    def photos_as_list(cls, v):
        return _text_items(v)

    @field_validator("estimated_cost", mode="before")
    @classmethod
    def first_number_of_cost(cls, v):
        # "$20 per person" -> 20.0
        if isinstance(v, str):
            match = _NUMBER.search(v.replace(",", ""))
            return float(match.group()) if match else None
        return v


class VehicleAssignment(BaseModel):
    model_config = _LLM_PAYLOAD_CONFIG

    vehicle_id: str
    vehicle_type: str
    occupants: int = Field(..., ge=0)
    route: str = ""
    parking_instructions: Optional[str] = None
    driver_notes: Optional[str] = None


class BudgetBreakdown(BaseModel):
    model_config = _LLM_PAYLOAD_CONFIG

    transportation: float = Field(default=0, ge=0)
    accommodation: float = Field(default=0, ge=0)
    meals: float = Field(default=0, ge=0)
    activities: float = Field(default=0, ge=0)
    miscellaneous: float = Field(default=0, ge=0)


class GeneratedTour(BaseModel):
    """
    Contenu d'un circuit tel qu'interprété depuis la réponse du LLM.
    Les listes absentes valent [], le budget détaillé absent vaut zéro partout.
    """
    model_config = _LLM_PAYLOAD_CONFIG

    title: str = ""
    duration: str = ""
    difficulty: Difficulty = "Medium"
    highlights: List[str] = Field(default_factory=list)
    itinerary: List[Stop] = Field(default_factory=list)
    vehicle_assignments: List[VehicleAssignment] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    budget_breakdown: Optional[BudgetBreakdown] = Field(default_factory=BudgetBreakdown)
    logistics_notes: List[str] = Field(default_factory=list)
    emergency_contacts: Optional[List[str]] = None
    total_budget: float = 0
    total_participants: int = Field(default=0, ge=0)

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, v):
        # "Medium/Hard (terrain de montagne)" -> "Medium"
        if isinstance(v, str):
            match = re.search(r"easy|medium|hard", v, re.IGNORECASE)
            if match:
                return match.group().capitalize()
        return v

    @field_validator("budget_breakdown", mode="before")
    @classmethod
    def default_breakdown(cls, v):
        return BudgetBreakdown() if v is None else v

    @field_validator("itinerary", "vehicle_assignments", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v

    @field_validator("highlights", "recommendations", "logistics_notes", mode="before")
    @classmethod
    def text_list(cls, v):
        return [] if v is None else _text_items(v)

    @field_validator("emergency_contacts", mode="before")
    @classmethod
    def contacts_as_text(cls, v):
        # les contacts arrivent souvent en objets {"name", "phone"}
        return _text_items(v)


class TourDraft(GeneratedTour):
    """Circuit prêt à être stocké (sans identifiant)."""
    destination: str = ""
    configuration: Optional[TourConfiguration] = None


class TourRecord(TourDraft):
    """Circuit stocké : id et created_at sont fixés par le store."""
    id: str
    created_at: datetime


# -----------------------------
# Affectation des véhicules
# -----------------------------

class ParticipantPreferences(BaseModel):
    seat_preference: Optional[str] = Field(default=None, description="ex: window, front")
    travel_companions: List[str] = Field(default_factory=list)
    needs_driver_seat_access: bool = False
    notes: Optional[str] = None


class Participant(BaseModel):
    name: str = Field(..., min_length=1)
    mobility: int = Field(default=5, ge=1, le=10)
    preferences: ParticipantPreferences = Field(default_factory=ParticipantPreferences)


class VehicleOption(BaseModel):
    type: str
    capacity: int = Field(..., ge=1)
    features: List[str] = Field(default_factory=list)


class AssignmentRequest(BaseModel):
    participants: List[Participant]
    vehicles: List[VehicleOption]
    destinations: List[str] = Field(default_factory=list)
    strict: bool = Field(
        default=False,
        description="Refuser plus de participants que de places déclarées.",
    )


class SeatAssignment(BaseModel):
    model_config = _LLM_PAYLOAD_CONFIG

    participant_name: str
    vehicle_index: int = Field(..., ge=0)
    vehicle_type: str
    seat_number: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("seat_number", "seatNumber", "seatAssignment"),
    )


class AssignmentPlan(BaseModel):
    assignments: List[SeatAssignment]
    reasoning: str
    source: Literal["generative", "fallback"]


# -----------------------------
# Optimisation / météo / préférences
# -----------------------------

class CurrentConditions(BaseModel):
    weather: str = "Unknown"
    traffic: str = "Normal"
    events: str = "None"
    time_constraints: str = "None"


class OptimizationPreferences(BaseModel):
    priority_changes: str = "None"
    new_constraints: str = "None"


class OptimizationRequest(BaseModel):
    tour_id: str
    current_conditions: CurrentConditions = Field(default_factory=CurrentConditions)
    preferences: OptimizationPreferences = Field(default_factory=OptimizationPreferences)


class OptimizationResult(BaseModel):
    suggestions: str
    alternative_routes: List[Dict[str, Any]] = Field(default_factory=list)


class TourPreferences(BaseModel):
    budget: str
    interests: List[str] = Field(default_factory=list)
    travel_style: str
    duration: int = Field(..., ge=1)
    group_size: int = Field(..., ge=1)
    destination: Optional[str] = None


class WeatherConditions(BaseModel):
    condition: str = "Unknown"
    temperature_c: Optional[float] = None
    precipitation_mm: Optional[float] = None


class WeatherImpact(BaseModel):
    affected_activities: List[str]
    alternatives: List[str]
    recommendations: List[str]


class TourSummary(BaseModel):
    overview: str
    key_highlights: List[str]
    logistics_overview: str
    budget_summary: str


# -----------------------------
# Analytics
# -----------------------------

class CostAnalysis(BaseModel):
    total_budget: float
    budget_breakdown: Optional[BudgetBreakdown] = None
    cost_per_person: Optional[float] = None
    cost_per_day: Optional[float] = None


class TimeAnalysis(BaseModel):
    total_duration: str
    average_stop_duration: float
    travel_time: float
    active_time: float


class EfficiencyMetrics(BaseModel):
    locations_per_day: Optional[float] = None
    budget_efficiency: Optional[int] = None
    time_efficiency: Optional[int] = None
    vehicle_utilization: int


class TourAnalytics(BaseModel):
    cost_analysis: CostAnalysis
    time_analysis: TimeAnalysis
    efficiency_metrics: EfficiencyMetrics
    suggestions: List[str]
    not_computable: List[str] = Field(default_factory=list)
