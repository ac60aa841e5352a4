"""Retrying command processing.

Commands run synchronously, each in the unit of work protean opens around its
handler. A unit of work aborted for a reason a retry may resolve (lock timeout,
write conflict, serialization failure, stale aggregate version) is retried with
exponential backoff; once every attempt has failed the caller gets ``Conflict``.
"""

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError, OperationalError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from dining.errors import Conflict, DuplicateReview
from dining.utils.db import UNIQUE_REVIEW_INDEX
from dining.utils.logging import get_logger

logger = get_logger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_PG_CODES = {"40001", "40P01", "55P03"}

TRANSIENT_SQLITE_MESSAGES = (
    "database is locked",
    "database table is locked",
    "cannot start a transaction within a transaction",
)

DEFAULT_POLICY = {"max_attempts": 3, "backoff_min": 0.05, "backoff_max": 0.5}


class TransientStoreError(Exception):
    """A unit of work aborted for reasons a retry may resolve."""


def _causes(exc):
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__ or exc.__context__


def translate_store_error(exc: Exception) -> Exception | None:
    """Map a store failure, possibly wrapped, to a domain or transient error."""
    for cause in _causes(exc):
        if isinstance(cause, ExpectedVersionError):
            return TransientStoreError(str(cause))

        if isinstance(cause, IntegrityError):
            detail = str(cause.orig)
            if UNIQUE_REVIEW_INDEX in detail or "review.author_id, review.establishment_id" in detail:
                return DuplicateReview()
            return None

        if isinstance(cause, OperationalError):
            message = str(cause.orig)
            if any(fragment in message for fragment in TRANSIENT_SQLITE_MESSAGES):
                return TransientStoreError(message)
            if getattr(cause.orig, "pgcode", None) in TRANSIENT_PG_CODES:
                return TransientStoreError(message)
            return None

    return None


def transaction_policy() -> dict:
    custom = current_domain.config.get("custom") or {}
    return {**DEFAULT_POLICY, **(custom.get("transactions") or {})}


def _log_retry(retry_state):
    logger.warning(
        "Transaction aborted, retrying",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


def run_with_retry(operation, *args, label=None, **kwargs):
    """Run ``operation`` and retry it while it fails transiently."""
    label = label or operation.__name__
    policy = transaction_policy()

    def attempt():
        try:
            return operation(*args, **kwargs)
        except Exception as exc:
            translated = translate_store_error(exc)
            if translated is None:
                raise
            raise translated from exc

    retrying = Retrying(
        stop=stop_after_attempt(policy["max_attempts"]),
        wait=wait_exponential(
            multiplier=policy["backoff_min"],
            min=policy["backoff_min"],
            max=policy["backoff_max"],
        ),
        retry=retry_if_exception_type(TransientStoreError),
        before_sleep=_log_retry,
        reraise=True,
    )

    try:
        return retrying(attempt)
    except TransientStoreError as exc:
        logger.error("Transaction failed after retries", operation=label, attempts=policy["max_attempts"])
        raise Conflict(operation=label) from exc


def process(command):
    """Process ``command`` synchronously and return its handler's result."""
    return run_with_retry(_process_now, command, label=type(command).__name__)


def _process_now(command):
    return current_domain.process(command, asynchronous=False)
