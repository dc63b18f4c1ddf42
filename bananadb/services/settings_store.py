import asyncio
import logging
from sqlalchemy.orm import Session
from bananadb.models import AppSetting

logger = logging.getLogger(__name__)

AI_PROVIDER = "ai_provider"
GEMINI_API_KEY = "gemini_api_key"
GEMINI_PROMPT = "gemini_prompt"
DEEPSEEK_API_KEY = "deepseek_api_key"
DEEPSEEK_PROMPT = "deepseek_prompt"
OPENROUTER_API_KEY = "openrouter_api_key"
OPENROUTER_PROMPT = "openrouter_prompt"
OPENROUTER_SITE_URL = "openrouter_site_url"
OPENROUTER_SITE_NAME = "openrouter_site_name"

ALL_KEYS = (
    AI_PROVIDER, GEMINI_API_KEY, GEMINI_PROMPT, DEEPSEEK_API_KEY, DEEPSEEK_PROMPT,
    OPENROUTER_API_KEY, OPENROUTER_PROMPT, OPENROUTER_SITE_URL, OPENROUTER_SITE_NAME,
)

class SettingsStore:
    """Key/value access to the app_settings table.

    Each call opens its own session so that lookups can run on worker threads
    and be awaited concurrently with asyncio.gather. ``read`` and
    ``write_many`` are the blocking versions for scripts.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def read(self, key: str) -> str | None:
        db: Session = self.session_factory()
        try:
            row = db.get(AppSetting, key)
            return row.value if row else None
        finally:
            db.close()

    def write_many(self, values: dict):
        """Write every key in one transaction: either all values are stored or none."""
        db: Session = self.session_factory()
        try:
            for key, value in values.items():
                row = db.get(AppSetting, key)
                if row is None:
                    db.add(AppSetting(key=key, value=value))
                else:
                    row.value = value
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self.read, key)

    async def set(self, key: str, value: str | None):
        await self.set_many({key: value})

    async def set_many(self, values: dict):
        await asyncio.to_thread(self.write_many, values)
        logger.info("Updated settings %s", ", ".join(values))
