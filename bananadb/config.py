from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://localhost/bananadb"
    # "disable" for local Postgres without TLS; ignored for SQLite URLs
    DB_SSLMODE: str = "require"
    SECRET_KEY: str = "CHANGE_ME_IMMEDIATELY"

    SITE_NAME: str = "BananaDB"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"

    DEFAULT_AI_PROVIDER: str = "gemini"

    GEMINI_MODEL: str = "gemini-2.0-flash"

    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com/v1"
    DEEPSEEK_MODEL: str = "deepseek-chat"

    OPENROUTER_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    OPENROUTER_MODEL: str = "anthropic/claude-3-haiku"

    # Low temperature keeps extraction output stable between runs
    AI_TEMPERATURE: float = 0.3
    PROVIDER_TIMEOUT_SECONDS: float = 60.0

    POKEAPI_URL: str = "https://pokeapi.co/api/v2/pokemon"
    POKEMON_COUNT: int = 1008

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
