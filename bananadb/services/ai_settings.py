"""Reads and writes the AI provider configuration kept in app_settings.

Settings are resolved fresh on every parse so that key or prompt edits made
on the admin screen apply to the very next request.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from bananadb.config import settings
from bananadb.errors import ConfigFetchError, PersistenceError
from bananadb.services import settings_store as keys

logger = logging.getLogger(__name__)

GEMINI = "gemini"
DEEPSEEK = "deepseek"
OPENROUTER = "openrouter"
PROVIDERS = (GEMINI, DEEPSEEK, OPENROUTER)
PROVIDER_LABELS = {GEMINI: "Gemini", DEEPSEEK: "Deepseek", OPENROUTER: "OpenRouter"}

# (api key, prompt) setting keys per provider
PROVIDER_KEYS = {
    GEMINI: (keys.GEMINI_API_KEY, keys.GEMINI_PROMPT),
    DEEPSEEK: (keys.DEEPSEEK_API_KEY, keys.DEEPSEEK_PROMPT),
    OPENROUTER: (keys.OPENROUTER_API_KEY, keys.OPENROUTER_PROMPT),
}

@dataclass(frozen=True)
class ResolvedAISettings:
    provider: str
    api_key: str = field(repr=False)
    prompt: str
    site_url: str | None = None
    site_name: str | None = None

@dataclass(frozen=True)
class AIStatus:
    provider: str
    has_key: bool
    has_prompt: bool

def _filled(value) -> bool:
    return bool(value and value.strip())

async def _active_provider(store) -> str:
    try:
        provider = await store.get(keys.AI_PROVIDER)
    except Exception as e:
        logger.error("Failed to load AI provider: %s", e)
        raise ConfigFetchError(f"Failed to load AI settings: {e}") from e
    provider = provider or settings.DEFAULT_AI_PROVIDER
    if provider not in PROVIDERS:
        raise ConfigFetchError(f"Unknown AI provider: {provider}")
    return provider

async def _fetch_all(store, names):
    try:
        return await asyncio.gather(*(store.get(name) for name in names))
    except Exception as e:
        logger.error("Failed to load AI settings %s: %s", ", ".join(names), e)
        raise ConfigFetchError(f"Failed to load AI settings: {e}") from e

async def resolve_ai_settings(store) -> ResolvedAISettings:
    provider = await _active_provider(store)
    key_name, prompt_name = PROVIDER_KEYS[provider]

    if provider == OPENROUTER:
        api_key, prompt, site_url, site_name = await _fetch_all(
            store, (key_name, prompt_name, keys.OPENROUTER_SITE_URL, keys.OPENROUTER_SITE_NAME))
        return ResolvedAISettings(
            provider=provider,
            api_key=api_key or "",
            prompt=prompt or "",
            site_url=site_url or settings.PUBLIC_BASE_URL,
            site_name=site_name or settings.SITE_NAME,
        )

    api_key, prompt = await _fetch_all(store, (key_name, prompt_name))
    return ResolvedAISettings(provider=provider, api_key=api_key or "", prompt=prompt or "")

async def check_ai_status(store) -> AIStatus:
    provider = await _active_provider(store)
    api_key, prompt = await _fetch_all(store, PROVIDER_KEYS[provider])
    return AIStatus(provider=provider, has_key=_filled(api_key), has_prompt=_filled(prompt))

async def load_all_ai_settings(store) -> dict:
    values = await _fetch_all(store, keys.ALL_KEYS)
    data = {name: value or "" for name, value in zip(keys.ALL_KEYS, values)}
    data[keys.AI_PROVIDER] = data[keys.AI_PROVIDER] or settings.DEFAULT_AI_PROVIDER
    data[keys.OPENROUTER_SITE_URL] = data[keys.OPENROUTER_SITE_URL] or settings.PUBLIC_BASE_URL
    data[keys.OPENROUTER_SITE_NAME] = data[keys.OPENROUTER_SITE_NAME] or settings.SITE_NAME
    return data

async def _write(store, values: dict):
    try:
        await store.set_many(values)
    except Exception as e:
        logger.error("Failed to save AI settings %s: %s", ", ".join(values), e)
        raise PersistenceError(f"Failed to save AI settings: {e}") from e

async def set_active_provider(store, provider: str):
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown AI provider: {provider}")
    await _write(store, {keys.AI_PROVIDER: provider})

async def save_provider_settings(store, provider: str, api_key: str, prompt: str,
                                 site_url: str | None = None, site_name: str | None = None):
    """Store a provider's settings in one write; nothing is saved if it fails."""
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown AI provider: {provider}")
    key_name, prompt_name = PROVIDER_KEYS[provider]
    values = {key_name: api_key, prompt_name: prompt}
    if provider == OPENROUTER:
        values[keys.OPENROUTER_SITE_URL] = site_url
        values[keys.OPENROUTER_SITE_NAME] = site_name
    await _write(store, values)
