"""Persists reviewed listings one at a time.

Items are written strictly in order, never concurrently, so progress
counters stay deterministic. A failing item never stops the run; only a run
where nothing was stored is an error.
"""
import logging
from dataclasses import dataclass, field
from bananadb.errors import AllSubmissionsFailedError, DuplicateListingError, PersistenceError
from bananadb.schemas import ParsedCarListing
from bananadb.services.identifiers import generate_unique_identifier

logger = logging.getLogger(__name__)

@dataclass
class SubmissionFailure:
    listing: ParsedCarListing
    reason: Exception

    @property
    def is_duplicate(self) -> bool:
        return isinstance(self.reason, DuplicateListingError)

    @property
    def message(self) -> str:
        return str(self.reason)

@dataclass
class SubmissionResult:
    success_count: int = 0
    failures: list = field(default_factory=list)

def build_record(listing: ParsedCarListing, source: str, project_id, user_id) -> dict:
    record = listing.column_values()
    record.update(
        source=source,
        unique_identifier=generate_unique_identifier(listing, source),
        user_id=user_id,
        project_id=project_id,
    )
    return record

async def submit_all(listings, source: str, project_id, user_id, create, on_progress=None) -> SubmissionResult:
    """Store ``listings`` through the async ``create(record)`` callable.

    ``on_progress(current, total, errors)`` is called after every item.
    Raises AllSubmissionsFailedError when not a single listing was stored.
    """
    result = SubmissionResult()
    total = len(listings)

    for listing in listings:
        record = build_record(listing, source, project_id, user_id)
        try:
            await create(record)
            result.success_count += 1
        except DuplicateListingError as e:
            logger.info("Skipping duplicate listing: %s", record["unique_identifier"])
            result.failures.append(SubmissionFailure(listing, e))
        except PersistenceError as e:
            logger.error("Error creating listing %s: %s", record["unique_identifier"], e)
            result.failures.append(SubmissionFailure(listing, e))
        if on_progress:
            on_progress(result.success_count, total, len(result.failures))

    if total and result.success_count == 0:
        raise AllSubmissionsFailedError(result.failures)
    if result.failures:
        logger.warning("Created %d listings with %d error(s)", result.success_count, len(result.failures))
    else:
        logger.info("Created %d listings", result.success_count)
    return result
