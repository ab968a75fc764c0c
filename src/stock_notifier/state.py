"""State enums for synchronized collections and their mutations."""

from enum import Enum


class CollectionStatus(Enum):
    """Load status of a synchronized collection."""

    IDLE = "idle"  # Last load succeeded (or none attempted yet)
    LOADING = "loading"  # A load is outstanding
    ERROR = "error"  # Last load failed


class MutationKind(Enum):
    """Kinds of optimistic mutation a collection can have pending."""

    ADD = "add"
    REMOVE = "remove"


class MutationErrorKind(Enum):
    """Why a mutation was not applied remotely."""

    ALREADY_PENDING = "already_pending"  # Another mutation on the same key is in flight
    REMOTE_REJECTED = "remote_rejected"  # Server answered with a non-2xx status
    TRANSPORT_FAILURE = "transport_failure"  # Server could not be reached


class HistoryPeriod(Enum):
    """Lookback windows accepted by the stock history endpoint."""

    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    TWO_YEARS = "2Y"
    FIVE_YEARS = "5Y"
    MAX = "Max"

    @classmethod
    def parse(cls, value: str) -> "HistoryPeriod":
        """
        Parse a period label case-insensitively.

        Raises:
            ValueError: If the label is not a known period.
        """
        for period in cls:
            if period.value.lower() == value.strip().lower():
                return period
        valid = ", ".join(p.value for p in cls)
        raise ValueError(f"Invalid period '{value}'. Valid periods: {valid}")


DEFAULT_HISTORY_PERIOD = HistoryPeriod.ONE_YEAR
