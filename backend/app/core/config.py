from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_name: str = "TestCraft AI"
    debug: bool = False

    # Persistence: "memory" for local runs and tests, "supabase" in prod
    store_backend: str = "memory"
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Text generation
    llm_provider: str = "openai"
    openai_api_key: str = ""
    gemini_api_key: str = ""
    llm_model: str = "gpt-4o"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 8192

    # Test generation
    generation_max_attempts: int = 2
    generation_acceptance_ratio: float = 0.8

    # Background jobs (advice, statistics)
    background_max_attempts: int = 2

    # CORS
    frontend_url: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
