"""
Package principal de l'application Kyrgyz Tour Guide.

Ce dossier contient :
- config.py : configuration globale (.env)
- errors.py : erreurs typées partagées par tous les modules
- llm/ : client du modèle génératif (Hugging Face)
- tours/ : modèles, validation, affectation des véhicules, analytics,
  interprétation des réponses du LLM et stockage des circuits
- api/ : backend FastAPI
"""
