"""Error taxonomy shared by the parsing and submission flows.

Every error here is meant to be shown to the user as a single plain-text
message, so ``str(error)`` is always a readable sentence.
"""


class BananaDBError(Exception):
    """Base class for errors surfaced to the UI."""


class ConfigFetchError(BananaDBError):
    """The AI provider settings could not be read from the store."""


class MissingCredentialError(BananaDBError):
    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider} API key is required")


class ProviderHTTPError(BananaDBError):
    def __init__(self, provider: str, message: str, status_code: int | None = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class EmptyResponseError(BananaDBError):
    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"No content in {provider} response")


class MalformedResponseError(BananaDBError):
    """The provider reply was not JSON or had no ``listings`` array."""


class NoValidListingsError(BananaDBError):
    def __init__(self, message: str = "No valid listings found in response"):
        super().__init__(message)


class DuplicateListingError(BananaDBError):
    def __init__(self, unique_identifier: str | None = None):
        self.unique_identifier = unique_identifier
        super().__init__("Duplicate listing - already exists in database")


class PersistenceError(BananaDBError):
    """Any store write failure other than a uniqueness conflict."""


class AllSubmissionsFailedError(BananaDBError):
    def __init__(self, failures):
        self.failures = list(failures)
        self.failure_count = len(self.failures)
        super().__init__(
            f"Failed to create any listings. {self.failure_count} error(s) occurred."
        )


class NotFoundError(BananaDBError):
    pass


class AccessDeniedError(BananaDBError):
    pass
