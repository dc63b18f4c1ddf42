"""LLM provider clients.

Every client sends one request made of a system prompt and the raw listing
text, asks for a JSON reply and returns the reply text untouched. Parsing the
reply is the validator's job. There is no retry: a failed call surfaces as a
single error and the user clicks parse again.
"""
import logging
import httpx
import openai
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from bananadb.config import settings
from bananadb.errors import ConfigFetchError, EmptyResponseError, MissingCredentialError, ProviderHTTPError

logger = logging.getLogger(__name__)

class ProviderClient:
    name = ""
    label = ""

    def require_key(self, credentials) -> str:
        api_key = (credentials.api_key or "").strip()
        if not api_key:
            raise MissingCredentialError(self.label)
        return api_key

    def default_error(self) -> str:
        return f"Failed to get response from {self.label}"

    async def send(self, prompt: str, text: str, credentials) -> str:
        raise NotImplementedError


class GeminiClient(ProviderClient):
    name = "gemini"
    label = "Gemini"

    def __init__(self, client_factory=None):
        self.client_factory = client_factory or genai.Client

    async def send(self, prompt: str, text: str, credentials) -> str:
        api_key = self.require_key(credentials)
        client = self.client_factory(api_key=api_key)
        config = genai_types.GenerateContentConfig(
            system_instruction=prompt or None,
            temperature=settings.AI_TEMPERATURE,
            response_mime_type="application/json",
        )
        logger.info("Sending %d chars to Gemini (%s)", len(text), settings.GEMINI_MODEL)
        try:
            response = await client.aio.models.generate_content(
                model=settings.GEMINI_MODEL, contents=text, config=config)
        except genai_errors.APIError as e:
            logger.error("Gemini error response: %s %s", e.code, e.message)
            raise ProviderHTTPError(self.label, e.message or self.default_error(), e.code) from e
        except httpx.HTTPError as e:
            logger.error("Gemini request failed: %s", e)
            raise ProviderHTTPError(self.label, f"{self.default_error()}: {e}") from e
        finally:
            await client.aio.aclose()

        content = getattr(response, "text", None)
        if not content or not content.strip():
            raise EmptyResponseError(self.label)
        logger.debug("Raw Gemini response: %s", content)
        return content


def _chat_messages(prompt: str, text: str) -> list[dict]:
    return [
        {"role": "system", "content": prompt},
        {"role": "user", "content": text},
    ]


class DeepseekClient(ProviderClient):
    """Deepseek speaks the OpenAI chat-completions protocol."""
    name = "deepseek"
    label = "Deepseek"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.transport = transport

    async def send(self, prompt: str, text: str, credentials) -> str:
        api_key = self.require_key(credentials)
        logger.info("Sending %d chars to Deepseek (%s)", len(text), settings.DEEPSEEK_MODEL)
        async with httpx.AsyncClient(transport=self.transport, timeout=settings.PROVIDER_TIMEOUT_SECONDS) as http_client:
            client = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=settings.DEEPSEEK_BASE_URL,
                max_retries=0,
                http_client=http_client,
            )
            try:
                completion = await client.chat.completions.create(
                    model=settings.DEEPSEEK_MODEL,
                    messages=_chat_messages(prompt, text),
                    temperature=settings.AI_TEMPERATURE,
                    response_format={"type": "json_object"},
                )
            except openai.APIStatusError as e:
                body = e.body if isinstance(e.body, dict) else {}
                message = body.get("message") or self.default_error()
                logger.error("Deepseek error response: %s %s", e.status_code, message)
                raise ProviderHTTPError(self.label, message, e.status_code) from e
            except openai.APIError as e:
                logger.error("Deepseek request failed: %s", e)
                raise ProviderHTTPError(self.label, f"{self.default_error()}: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise EmptyResponseError(self.label)
        logger.debug("Raw Deepseek response: %s", content)
        return content


class OpenRouterClient(ProviderClient):
    name = "openrouter"
    label = "OpenRouter"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.transport = transport

    def _error_message(self, payload) -> str:
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return self.default_error()

    async def send(self, prompt: str, text: str, credentials) -> str:
        api_key = self.require_key(credentials)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": credentials.site_url or settings.PUBLIC_BASE_URL,
            "X-Title": credentials.site_name or settings.SITE_NAME,
        }
        payload = {
            "model": settings.OPENROUTER_MODEL,
            "messages": _chat_messages(prompt, text),
            "temperature": settings.AI_TEMPERATURE,
            "response_format": {"type": "json_object"},
        }
        logger.info("Sending %d chars to OpenRouter (%s)", len(text), settings.OPENROUTER_MODEL)
        async with httpx.AsyncClient(transport=self.transport, timeout=settings.PROVIDER_TIMEOUT_SECONDS) as client:
            try:
                resp = await client.post(settings.OPENROUTER_URL, headers=headers, json=payload)
            except httpx.HTTPError as e:
                logger.error("OpenRouter request failed: %s", e)
                raise ProviderHTTPError(self.label, f"{self.default_error()}: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.is_error:
            message = self._error_message(data)
            logger.error("OpenRouter error response: %s %s", resp.status_code, message)
            raise ProviderHTTPError(self.label, message, resp.status_code)
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            # OpenRouter reports some upstream failures with a 200 status
            raise ProviderHTTPError(self.label, self._error_message(data), resp.status_code)

        content = None
        if isinstance(data, dict) and data.get("choices"):
            message = data["choices"][0].get("message") or {}
            content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise EmptyResponseError(self.label)
        logger.debug("Raw OpenRouter response: %s", content)
        return content


PROVIDER_CLIENTS = {
    GeminiClient.name: GeminiClient,
    DeepseekClient.name: DeepseekClient,
    OpenRouterClient.name: OpenRouterClient,
}

def get_provider_client(provider: str, **kwargs) -> ProviderClient:
    try:
        client_cls = PROVIDER_CLIENTS[provider]
    except KeyError:
        raise ConfigFetchError(f"Unknown AI provider: {provider}") from None
    return client_cls(**kwargs)
