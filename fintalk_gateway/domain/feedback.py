"""Feedback input rules"""

from typing import Any, Optional

from fintalk_gateway.domain.exceptions import ValidationError

MIN_RATING = 1
MAX_RATING = 5


def validate_feedback(user_id: Optional[str], rating: Any) -> int:
    """Return the rating as an int, or raise ValidationError"""
    if not user_id or not user_id.strip():
        raise ValidationError("user_id is required")
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating
