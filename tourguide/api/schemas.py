from pydantic import BaseModel, Field
from typing import List, Optional


class MessageResponse(BaseModel):
    message: str


class LocationInfoResponse(BaseModel):
    info: str = Field(..., description="Présentation du lieu générée par le LLM")


class RecommendationsResponse(BaseModel):
    recommendations: str = Field(..., description="Recommandations personnalisées (texte libre)")


class AlternativesResponse(BaseModel):
    alternatives: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Message d'erreur lisible")
    field: Optional[str] = Field(
        default=None,
        description="Champ fautif pour une configuration invalide.",
    )
