"""Domain errors."""


class MealDiaryError(Exception):
    """Base error for the meal diary."""


class NotFoundError(MealDiaryError):
    """Raised when a food, slot item or position does not resolve."""


class InvalidArgumentError(MealDiaryError, ValueError):
    """Raised for malformed input such as an unknown day or slot id."""


class StoreUnavailableError(MealDiaryError):
    """Raised when the persistence layer cannot be reached."""
