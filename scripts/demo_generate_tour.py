from pprint import pprint

from tourguide.errors import TourGuideError
from tourguide.llm.client import HuggingFaceDelegate
from tourguide.tours.analytics import analyze_tour
from tourguide.tours.generator import create_tour
from tourguide.tours.models import (
    LocationPreference,
    PreferenceProfile,
    Region,
    TourConfiguration,
    TourType,
    VehicleConfig,
    VehicleType,
)
from tourguide.tours.store import InMemoryTourStore


def print_tour_pretty(tour):
    print("=" * 60)
    print(f" {tour.title} - {tour.destination} - {tour.duration} ({tour.difficulty})")
    print("=" * 60)
    print()

    for stop in tour.itinerary:
        print(f"🕘 {stop.time}  {stop.location} ({stop.duration})")
        if stop.description:
            print(f"      {stop.description}")
        for tip in stop.tips:
            print(f"      💡 {tip}")
        print("-" * 60)

    print("\n🚐 Véhicules :")
    for a in tour.vehicle_assignments:
        print(f"    - {a.vehicle_id} ({a.vehicle_type}) : {a.occupants} pers. / {a.route}")

    if tour.recommendations:
        print("\n💡 Recommandations :")
        for r in tour.recommendations:
            print(f"    - {r}")

    print("\n===== JSON complet (pour debug / API) =====")
    print(tour.model_dump_json(indent=2, exclude={"configuration"}))


def main():
    config = TourConfiguration(
        primary_region=Region.ISSYK_KUL,
        duration=5,
        tour_type=TourType.NOMADIC_EXPERIENCE,
        budget=3000,
        vehicles=[
            VehicleConfig(type=VehicleType.SUV_4WD, occupants=4, capacity=5, driver_included=True),
        ],
        location_preferences=[
            LocationPreference(name="Karakol", priority=8, min_time=4, max_time=24),
            LocationPreference(name="Jeti-Oguz", priority=6, min_time=2, max_time=6, altitude=2200),
        ],
        configuration=PreferenceProfile(
            mobility_level=7,
            adventure_level=6,
            cultural_immersion=9,
            nature_focus=8,
            traditional_experience=9,
            budget_flexibility=5,
        ),
        season="summer",
        interests=["yurt stays", "horse riding"],
    )

    print("Configuration de test :")
    pprint(config.model_dump(mode="json"))
    print("\nGénération du circuit...\n")

    store = InMemoryTourStore()
    try:
        tour = create_tour(config, store, HuggingFaceDelegate())
    except TourGuideError as e:
        print(f"❌ Erreur lors de la génération du circuit : {e}")
        return

    print_tour_pretty(tour)

    print("\n===== Analytics =====")
    print(analyze_tour(tour).model_dump_json(indent=2))


if __name__ == "__main__":
    main()
