import enum
import logging
from bananadb.errors import BananaDBError
from bananadb.schemas import ParsedCarListing
from bananadb.services.ai_settings import resolve_ai_settings
from bananadb.services.providers import get_provider_client
from bananadb.services.validation import validate_response

logger = logging.getLogger(__name__)

class ParseState(str, enum.Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    SENDING = "sending"
    VALIDATING = "validating"
    SUCCESS = "success"
    FAILED = "failed"

class ListingParser:
    """Turns pasted listing text into validated ParsedCarListing records.

    One parse call walks resolving -> sending -> validating. Any failure is
    re-raised with ``error.stage`` set to the stage that failed; partial
    results are never returned. ``client_options`` is passed to the provider
    client constructor (tests inject transports through it).
    """

    def __init__(self, store, client_options: dict | None = None):
        self.store = store
        self.client_options = client_options or {}
        self.state = ParseState.IDLE
        self.last_outcome = None
        self.last_response = None

    async def parse(self, raw_text: str) -> list[ParsedCarListing]:
        self.last_response = None
        try:
            self.state = ParseState.RESOLVING
            ai_settings = await resolve_ai_settings(self.store)

            self.state = ParseState.SENDING
            client = get_provider_client(ai_settings.provider, **self.client_options.get(ai_settings.provider, {}))
            self.last_response = await client.send(ai_settings.prompt, raw_text, ai_settings)

            self.state = ParseState.VALIDATING
            listings = validate_response(self.last_response)
        except BananaDBError as e:
            e.stage = self.state
            self.last_outcome = ParseState.FAILED
            logger.error("Parsing failed while %s: %s", self.state.value, e)
            raise
        finally:
            self.state = ParseState.IDLE

        self.last_outcome = ParseState.SUCCESS
        logger.info("Parsed %d listings via %s", len(listings), ai_settings.provider)
        return listings
