# tourguide/api/main.py

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tourguide.api.schemas import (
    AlternativesResponse,
    ErrorResponse,
    LocationInfoResponse,
    MessageResponse,
    RecommendationsResponse,
)
from tourguide.config import CORS_ORIGINS, LOG_LEVEL
from tourguide.errors import (
    CapacityExhaustedError,
    ConfigurationError,
    DelegateError,
    NotFoundError,
    TourGuideError,
)
from tourguide.llm.client import GenerativeDelegate, HuggingFaceDelegate
from tourguide.tours.analytics import analyze_tour, estimate_weather_impact, summarize_tour
from tourguide.tours.assignments import generate_vehicle_assignments
from tourguide.tours.generator import (
    create_tour,
    get_location_info,
    get_personalized_recommendations,
    optimize_tour_route,
    suggest_alternative_locations,
    update_tour,
)
from tourguide.tours.models import (
    AssignmentPlan,
    AssignmentRequest,
    OptimizationRequest,
    OptimizationResult,
    TourAnalytics,
    TourConfiguration,
    TourPreferences,
    TourRecord,
    TourSummary,
    TourUpdate,
    WeatherConditions,
    WeatherImpact,
)
from tourguide.tours.store import InMemoryTourStore, TourStore

# logging
logging.basicConfig(level=LOG_LEVEL)
log = logging.getLogger("tourguide")


app = FastAPI(
    title="Kyrgyz Tour Guide API",
    description="Backend IA pour circuits au Kirghizistan : génération, véhicules, analytics",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =====================================================
#  🔧 DÉPENDANCES (store + LLM), remplaçables dans les tests
# =====================================================

_store = InMemoryTourStore()
_delegate: Optional[GenerativeDelegate] = None


def get_store() -> TourStore:
    return _store


def get_delegate() -> GenerativeDelegate:
    global _delegate
    if _delegate is None:
        _delegate = HuggingFaceDelegate()
    return _delegate


# =====================================================
#  GESTION GLOBALE DES ERREURS (JSON uniquement)
# =====================================================

ERROR_STATUS = (
    (ConfigurationError, 400),
    (NotFoundError, 404),
    (CapacityExhaustedError, 409),
    (DelegateError, 502),
)


@app.exception_handler(TourGuideError)
async def tour_error_handler(request: Request, exc: TourGuideError):
    status = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 422)
    log.warning("%s %s -> %s: %s", request.method, request.url.path, status, exc)
    body = ErrorResponse(error=str(exc), field=getattr(exc, "field", None))
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # stack complète dans les logs, rien côté client
    log.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": "Server error"})


# =====================================================
#  ENDPOINTS API
# =====================================================

@app.get("/health")
def health_check():
    return {"status": "ok"}


# -----------------------------------------------------
#  🧭 CRUD DES CIRCUITS
# -----------------------------------------------------
@app.post("/tours", response_model=TourRecord, status_code=201)
def create_tour_endpoint(
    config: TourConfiguration,
    store: TourStore = Depends(get_store),
    delegate: GenerativeDelegate = Depends(get_delegate),
):
    """
    Génère un circuit complet à partir d'une TourConfiguration.
    """
    return create_tour(config, store, delegate)


@app.get("/tours", response_model=List[TourRecord])
def list_tours(store: TourStore = Depends(get_store)):
    return store.list()


@app.get("/tours/location/{location}", response_model=LocationInfoResponse)
def location_info(location: str, delegate: GenerativeDelegate = Depends(get_delegate)):
    return LocationInfoResponse(info=get_location_info(location, delegate))


@app.get("/tours/analytics/{tour_id}", response_model=TourAnalytics)
def tour_analytics(tour_id: str, store: TourStore = Depends(get_store)):
    """
    Coûts, temps et efficacité d'un circuit stocké.
    Les métriques non calculables valent null (voir `not_computable`).
    """
    return analyze_tour(store.get(tour_id))


@app.get("/tours/{tour_id}", response_model=TourRecord)
def get_tour(tour_id: str, store: TourStore = Depends(get_store)):
    return store.get(tour_id)


@app.put("/tours/{tour_id}", response_model=TourRecord)
def update_tour_endpoint(
    tour_id: str,
    patch: TourUpdate,
    store: TourStore = Depends(get_store),
    delegate: GenerativeDelegate = Depends(get_delegate),
):
    return update_tour(tour_id, patch, store, delegate)


@app.delete("/tours/{tour_id}", response_model=MessageResponse)
def delete_tour(tour_id: str, store: TourStore = Depends(get_store)):
    store.delete(tour_id)
    log.info("Tour %s deleted", tour_id)
    return MessageResponse(message="Tour deleted successfully")


# -----------------------------------------------------
#  🚐 VÉHICULES / OPTIMISATION
# -----------------------------------------------------
@app.post("/tours/vehicle-assignments", response_model=AssignmentPlan)
def vehicle_assignments(
    request: AssignmentRequest,
    delegate: GenerativeDelegate = Depends(get_delegate),
):
    """
    Affectation des participants aux véhicules.
    Sans réponse exploitable du LLM, on remplit les véhicules dans l'ordre.
    """
    return generate_vehicle_assignments(request, delegate)


@app.post("/tours/optimize", response_model=OptimizationResult)
def optimize_tour(
    request: OptimizationRequest,
    store: TourStore = Depends(get_store),
    delegate: GenerativeDelegate = Depends(get_delegate),
):
    tour = store.get(request.tour_id)
    return optimize_tour_route(tour, request, delegate)


# -----------------------------------------------------
#  ⭐ RECOMMANDATIONS / RÉSUMÉ / MÉTÉO
# -----------------------------------------------------
@app.post("/tours/recommendations", response_model=RecommendationsResponse)
def personalized_recommendations(
    preferences: TourPreferences,
    delegate: GenerativeDelegate = Depends(get_delegate),
):
    return RecommendationsResponse(
        recommendations=get_personalized_recommendations(preferences, delegate)
    )


@app.get("/tours/{tour_id}/summary", response_model=TourSummary)
def tour_summary(tour_id: str, store: TourStore = Depends(get_store)):
    return summarize_tour(store.get(tour_id))


@app.post("/tours/{tour_id}/weather-impact", response_model=WeatherImpact)
def weather_impact(
    tour_id: str,
    conditions: WeatherConditions,
    store: TourStore = Depends(get_store),
):
    return estimate_weather_impact(store.get(tour_id), conditions)


@app.get("/tours/{tour_id}/alternatives", response_model=AlternativesResponse)
def alternative_locations(
    tour_id: str,
    location: str,
    store: TourStore = Depends(get_store),
    delegate: GenerativeDelegate = Depends(get_delegate),
):
    tour = store.get(tour_id)
    return AlternativesResponse(
        alternatives=suggest_alternative_locations(tour, location, delegate)
    )
