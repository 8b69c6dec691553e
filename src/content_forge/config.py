from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FREE_GENERATION_LIMIT = 5


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    llm_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        alias="LLM_BASE_URL",
    )
    llm_model: str = Field(default="gemini-2.5-flash", alias="LLM_MODEL")
    llm_timeout_seconds: float = Field(default=120.0, alias="LLM_TIMEOUT_SECONDS")
    llm_max_output_tokens: int = Field(default=3000, alias="LLM_MAX_OUTPUT_TOKENS")
    llm_temperature: float = Field(default=0.5, alias="LLM_TEMPERATURE")

    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_service_role_key: str = Field(default="", alias="SUPABASE_SERVICE_ROLE_KEY")
    store_timeout_seconds: float = Field(default=15.0, alias="STORE_TIMEOUT_SECONDS")

    section_fanout: bool = Field(default=False, alias="SECTION_FANOUT")

    def model_post_init(self, __context) -> None:  # type: ignore[override]
        self.supabase_url = self.supabase_url.strip().rstrip("/")
        self.llm_model = self.llm_model.strip() or "gemini-2.5-flash"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
