# tourguide/config.py
from pathlib import Path
from dotenv import load_dotenv
import os

# -------------------------
# Paths
# -------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

# Load variables from .env file
load_dotenv(ENV_PATH)

# -------------------------
# Hugging Face configuration (Open-Source Models)
# -------------------------

# Token de l'API Inference (obligatoire pour générer des circuits)
HF_API_KEY = os.getenv("HF_API_KEY", None)

# Modèle de génération de texte
LLM_MODEL_NAME = os.getenv(
    "LLM_MODEL_NAME",
    "mistralai/Mistral-7B-Instruct-v0.2"
)

# Pas de timeout imposé par défaut : seul le client HF décide
_timeout = os.getenv("LLM_TIMEOUT_S")
LLM_TIMEOUT_S = float(_timeout) if _timeout else None

# -------------------------
# API / logging
# -------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]

# Point de départ utilisé quand la requête n'en précise pas
DEFAULT_STARTING_LOCATION = os.getenv("DEFAULT_STARTING_LOCATION", "Bishkek")
