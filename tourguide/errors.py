# tourguide/errors.py

from __future__ import annotations

from typing import Optional


class TourGuideError(Exception):
    """Base commune de toutes les erreurs métier du projet."""


class ConfigurationError(TourGuideError):
    """
    Configuration de circuit invalide ou irréalisable.
    `field` désigne le champ fautif (ex: "vehicles[1].occupants").
    """

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class CapacityExhaustedError(TourGuideError):
    """Affectation stricte : plus de participants que de places déclarées."""

    def __init__(self, participants: int, capacity: int):
        super().__init__(
            f"{participants} participants exceed total vehicle capacity ({capacity})"
        )
        self.participants = participants
        self.capacity = capacity


class DelegateError(TourGuideError):
    """Échec du modèle génératif (réseau, quota, erreur du modèle...)."""


class ParseError(TourGuideError):
    """Réponse du modèle inexploitable. Toujours rattrapée localement."""


class NotFoundError(TourGuideError):
    def __init__(self, tour_id: str):
        super().__init__(f"Tour with ID {tour_id} not found")
        self.tour_id = tour_id


class DivisionDomainError(TourGuideError):
    """Métrique non calculable : division par zéro."""

    def __init__(self, metric: str, detail: Optional[str] = None):
        super().__init__(detail or f"{metric} is not computable (division by zero)")
        self.metric = metric


class MalformedDurationError(TourGuideError):
    """La durée ne commence pas par un nombre entier (ex: "Multi-day")."""

    def __init__(self, duration: str):
        super().__init__(f"Cannot read a number of days from duration {duration!r}")
        self.duration = duration
