from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SE4X_", env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./se4x_ledger.db"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    # Hard ceiling on campaign length; add_turn refuses beyond it
    max_turns: int = 200


settings = Settings()
