"""Persistence for the one-per-business user rating."""

import logging
from numbers import Integral, Real
from typing import Any, Dict, List, Optional

from psycopg2 import extras

from placerank.core.db import transaction
from placerank.core.models import RatingRecord

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
DEFAULT_LIST_LIMIT = 50

_COLUMNS = "id, business_id, business_name, user_rating, user_review, visited_date, updated_at"


class ValidationError(ValueError):
    """Raised when caller input is rejected before touching storage."""


# A single statement so two concurrent submissions for the same business can
# never both insert; the unique index on business_id arbitrates. visited_date
# is only ever set by the INSERT branch.
_UPSERT_RATING = f"""
INSERT INTO ratings (
    business_id,
    business_name,
    user_rating,
    user_review,
    visited_date,
    updated_at
) VALUES (
    %(business_id)s,
    %(business_name)s,
    %(user_rating)s,
    %(user_review)s,
    NOW(),
    NOW()
)
ON CONFLICT (business_id) DO UPDATE SET
    business_name = EXCLUDED.business_name,
    user_rating = EXCLUDED.user_rating,
    user_review = EXCLUDED.user_review,
    updated_at = NOW()
RETURNING {_COLUMNS};
"""

_SELECT_RATING = f"""
SELECT {_COLUMNS}
FROM ratings
WHERE business_id = %(business_id)s
LIMIT 1;
"""

_LIST_RATINGS = f"""
SELECT {_COLUMNS}
FROM ratings
ORDER BY visited_date DESC, id DESC
LIMIT %(limit)s
OFFSET %(offset)s;
"""


def validate_rating(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Rating must be an integer between 1 and 5")
    if isinstance(value, Integral):
        rating = int(value)
    elif isinstance(value, Real) and float(value).is_integer():
        rating = int(value)
    else:
        raise ValidationError("Rating must be an integer between 1 and 5")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError("Rating must be between 1 and 5")
    return rating


def _require_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def _validate_page(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise ValidationError(f"{label} must be an integer")
    if value < 0:
        raise ValidationError(f"{label} must not be negative")
    return int(value)


def _to_record(row: Dict[str, Any]) -> RatingRecord:
    return RatingRecord(
        id=row["id"],
        business_id=row["business_id"],
        business_name=row["business_name"],
        user_rating=row["user_rating"],
        user_review=row["user_review"],
        visited_date=row["visited_date"],
        updated_at=row["updated_at"],
    )


def get_rating(business_id: str) -> Optional[RatingRecord]:
    """Return the stored rating for a business, or None when it was never rated."""
    business_id = _require_text(business_id, "Business ID")
    with transaction() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(_SELECT_RATING, {"business_id": business_id})
            row = cur.fetchone()
    return _to_record(row) if row else None


def upsert_rating(
    business_id: str,
    business_name: str,
    user_rating: Any,
    user_review: Optional[str] = None,
) -> RatingRecord:
    """Create the rating for a business or overwrite the existing one."""
    if user_review is not None and not isinstance(user_review, str):
        raise ValidationError("Review must be text")
    params = {
        "business_id": _require_text(business_id, "Business ID"),
        "business_name": _require_text(business_name, "Business name"),
        "user_rating": validate_rating(user_rating),
        "user_review": user_review,
    }

    with transaction() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(_UPSERT_RATING, params)
            row = cur.fetchone()

    record = _to_record(row)
    logger.debug("Upserted rating %s for %s", record.user_rating, record.business_id)
    return record


def list_ratings(limit: int = DEFAULT_LIST_LIMIT, offset: int = 0) -> List[RatingRecord]:
    """Ratings ordered by when the business was first rated, newest first."""
    params = {
        "limit": _validate_page(limit, "limit"),
        "offset": _validate_page(offset, "offset"),
    }
    with transaction() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(_LIST_RATINGS, params)
            rows = cur.fetchall()
    return [_to_record(row) for row in rows]
