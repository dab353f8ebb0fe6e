# tourguide/tours/validation.py

from __future__ import annotations

from tourguide.errors import ConfigurationError
from tourguide.tours.models import TourConfiguration


def validate_tour_configuration(config: TourConfiguration) -> None:
    """
    Vérifie que la configuration groupe / véhicules / lieux est réalisable.

    À appeler AVANT tout appel au LLM ou toute affectation : une configuration
    impossible lève ConfigurationError avec le champ fautif.
    """
    if not config.vehicles:
        raise ConfigurationError(
            "vehicles", "At least one vehicle configuration is required"
        )

    for index, vehicle in enumerate(config.vehicles):
        if vehicle.occupants > vehicle.capacity:
            raise ConfigurationError(
                f"vehicles[{index}].occupants",
                f"Vehicle {index + 1}: Occupants ({vehicle.occupants}) "
                f"exceed capacity ({vehicle.capacity})",
            )

    total_capacity = sum(v.capacity for v in config.vehicles)
    total_occupants = sum(v.occupants for v in config.vehicles)
    if total_occupants > total_capacity:
        raise ConfigurationError(
            "vehicles", "Total occupants exceed total vehicle capacity"
        )

    for index, location in enumerate(config.location_preferences):
        if location.min_time > location.max_time:
            raise ConfigurationError(
                f"location_preferences[{index}].min_time",
                f"Location {index + 1} ({location.name}): "
                "Minimum time cannot exceed maximum time",
            )
