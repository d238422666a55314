from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "GenShai"
    debug: bool = False

    # Storage
    db_path: Path = Path(__file__).resolve().parent.parent.parent / "genshai.db"

    # LLM gateway
    llm_provider: str = "gateway"  # gateway
    gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    gateway_api_key: str = ""
    gateway_connect_timeout: float = 10.0
    default_model: str = "google/gemini-3-flash-preview"
    blueprint_model: str = "google/gemini-2.5-flash"

    # Chat
    history_limit: int = 30

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "GENSHAI_",
    }


settings = Settings()
