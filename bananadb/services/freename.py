import logging
import random
import httpx
from bananadb.config import settings

logger = logging.getLogger(__name__)

async def random_freename(transport: httpx.AsyncBaseTransport | None = None, rng: random.Random | None = None) -> str:
    """Pick a random Pokemon name from PokeAPI to label a new project."""
    pokemon_id = (rng or random).randint(1, settings.POKEMON_COUNT)
    try:
        async with httpx.AsyncClient(transport=transport, timeout=10) as client:
            resp = await client.get(f"{settings.POKEAPI_URL}/{pokemon_id}")
            resp.raise_for_status()
            data = resp.json()
            name = data.get("name") if isinstance(data, dict) else None
            if name:
                return name
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Error fetching Pokemon name: %s", e)
    return f"pokemon{pokemon_id}"
