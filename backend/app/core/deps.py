import logging
import os
from functools import lru_cache
from types import SimpleNamespace

from fastapi import Header, HTTPException
from openai import OpenAI
from pydantic import BaseModel
from supabase import create_client, Client

from app.core.config import get_settings

logger = logging.getLogger("testcraft.deps")
_prompt_logger = logging.getLogger("testcraft.llm_prompts")

ADMIN_ROLE = "admin"


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise RuntimeError("Supabase settings missing (SUPABASE_URL / SUPABASE_SERVICE_KEY)")
    return create_client(settings.supabase_url, settings.supabase_service_key)


# ── Gemini adapter: mimics the OpenAI client interface ──────────────────────
# AIService calls client.chat.completions.create(...) for either provider.

class _GeminiCompletions:
    def __init__(self, api_key: str, model: str):
        self._api_key = api_key
        self._model = model

    def create(self, model=None, messages=None, temperature=0.7, max_tokens=None, **kwargs):
        from google import genai
        from google.genai import types

        system_parts = [m["content"] for m in (messages or []) if m.get("role") == "system"]
        user_parts = [m["content"] for m in (messages or []) if m.get("role") != "system"]
        user_prompt = "\n\n".join(user_parts)

        if os.environ.get("DEBUG_LLM_PROMPTS", "").lower() in ("1", "true"):
            _prompt_logger.warning("gemini prompt (temp=%s):\n%s", temperature, user_prompt)

        client = genai.Client(api_key=self._api_key)
        config = types.GenerateContentConfig(
            system_instruction="\n\n".join(system_parts) or None,
            temperature=temperature,
            max_output_tokens=max_tokens or 8192,
        )
        response = client.models.generate_content(
            model=self._model,
            contents=user_prompt,
            config=config,
        )
        message = SimpleNamespace(content=response.text or "")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class GeminiClientAdapter:
    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        self.chat = SimpleNamespace(completions=_GeminiCompletions(api_key, model))


def get_llm_client(settings=None):
    """Return the active LLM client based on llm_provider setting."""
    if settings is None:
        settings = get_settings()
    if settings.llm_provider == "gemini":
        return GeminiClientAdapter(api_key=settings.gemini_api_key)
    return OpenAI(api_key=settings.openai_api_key)


# ── Authentication context ───────────────────────────────────────────────────
# Identity is verified by Supabase Auth; this module only reads the result.

class Requester(BaseModel):
    user_id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def get_current_user(authorization: str = Header(None)) -> Requester:
    """Resolve the bearer token to a verified user; raise 401 on failure."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")

    token = authorization.replace("Bearer ", "")
    try:
        resp = get_supabase_client().auth.get_user(token)
        if not resp or not resp.user:
            raise HTTPException(status_code=401, detail="Invalid token")
        metadata = getattr(resp.user, "user_metadata", None) or {}
        role = str(metadata.get("role") or "user").lower()
        return Requester(user_id=str(resp.user.id), role=role)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("[deps.get_current_user] Auth failed: %s", exc)
        raise HTTPException(status_code=401, detail=f"Authentication failed: {exc}")
