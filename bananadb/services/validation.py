"""Validation of raw provider replies into ParsedCarListing records.

Providers are asked for ``{"listings": [...]}``. The reply is untrusted text,
so every entry is type checked before it reaches the review screen.
"""
import json
import logging
from dataclasses import dataclass
from typing import Union
from bananadb.errors import MalformedResponseError, NoValidListingsError
from bananadb.schemas import ParsedCarListing

logger = logging.getLogger(__name__)

MALFORMED = "malformed"
NO_VALID_LISTINGS = "no_valid_listings"

@dataclass(frozen=True)
class ValidationOk:
    listings: list

@dataclass(frozen=True)
class ValidationErr:
    kind: str
    detail: str

ValidationResult = Union[ValidationOk, ValidationErr]

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def is_valid_listing(item) -> bool:
    return (
        isinstance(item, dict)
        and isinstance(item.get("make"), str)
        and isinstance(item.get("model"), str)
        and _is_number(item.get("year"))
        and _is_number(item.get("mileage"))
        and _is_number(item.get("price"))
    )

def check_response(text: str) -> ValidationResult:
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as e:
        return ValidationErr(MALFORMED, f"Failed to parse AI response: {e}")

    entries = data.get("listings") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        return ValidationErr(MALFORMED, "Response does not contain a listings array")

    listings = [ParsedCarListing.model_validate(item) for item in entries if is_valid_listing(item)]
    if not listings:
        return ValidationErr(NO_VALID_LISTINGS, "No valid listings found in response")
    if len(listings) < len(entries):
        logger.info("Dropped %d of %d listings that failed validation", len(entries) - len(listings), len(entries))
    return ValidationOk(listings)

def validate_response(text: str) -> list[ParsedCarListing]:
    result = check_response(text)
    if isinstance(result, ValidationOk):
        return result.listings
    if result.kind == NO_VALID_LISTINGS:
        raise NoValidListingsError(result.detail)
    raise MalformedResponseError(result.detail)
