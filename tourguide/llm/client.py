# tourguide/llm/client.py

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from huggingface_hub import InferenceClient

from tourguide.config import HF_API_KEY, LLM_MODEL_NAME, LLM_TIMEOUT_S
from tourguide.errors import DelegateError

log = logging.getLogger(__name__)


class GenerativeDelegate(Protocol):
    """
    Capacité de génération de texte vue par le reste du code :
    un prompt en entrée, du texte (pas forcément du JSON) en sortie.
    Toute panne se traduit par DelegateError.
    """

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_new_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> str:
        ...


# ---------- Appel direct du LLM Hugging Face ----------

class HuggingFaceDelegate:
    """
    Appelle le modèle Hugging Face via l'API chat (InferenceClient).
    Le client est créé au premier appel : l'API peut démarrer sans token.
    """

    def __init__(
        self,
        model: str = LLM_MODEL_NAME,
        token: Optional[str] = HF_API_KEY,
        timeout: Optional[float] = LLM_TIMEOUT_S,
    ):
        self.model = model
        self.token = token
        self.timeout = timeout
        self._client: Optional[InferenceClient] = None

    def _get_client(self) -> InferenceClient:
        if self._client is None:
            self._client = InferenceClient(
                model=self.model, token=self.token, timeout=self.timeout
            )
        return self._client

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_new_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> str:
        if not self.token:
            raise DelegateError("HF_API_KEY manquant dans .env")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            resp = self._get_client().chat_completion(
                messages=messages,
                max_tokens=max_new_tokens,
                temperature=temperature,
            )
        except Exception as e:
            log.warning("Hugging Face call failed (%s): %s", self.model, e)
            raise DelegateError(f"Erreur lors de l'appel LLM: {e}") from e

        return extract_completion_text(resp)


def extract_completion_text(resp: Any) -> str:
    """
    Extraction défensive du texte.
    Selon la version du client, resp peut être :
    - une string
    - un dict avec 'generated_text' ou 'choices'
    - un ChatCompletionOutput (resp.choices[0].message.content)
    """
    if isinstance(resp, str):
        return resp
    if isinstance(resp, dict):
        if "generated_text" in resp:
            return resp["generated_text"]
        choices = resp.get("choices") or []
        if choices:
            return (choices[0].get("message") or {}).get("content") or ""
    choices = getattr(resp, "choices", None)
    if choices:
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if content is None and isinstance(message, dict):
            content = message.get("content")
        return content or ""
    return str(resp)
