from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    memolil_data_dir: Path = Path.home() / ".memolil" / "data"
    sqlite_filename: str = "memolil.db"
    default_namespace: str = "personal"
    seed_on_empty: bool = True

    host: str = "127.0.0.1"
    port: int = 0  # 0 picks a free port
    log_level: str = "warning"

    ollama_url: str = "http://localhost:11434"
    llm_model: str = ""  # empty disables remote question generation
    llm_timeout: float = 60.0

    model_config = {"env_prefix": "MEMOLIL_"}


settings = Settings()
