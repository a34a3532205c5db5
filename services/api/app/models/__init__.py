from .all_models import Recommendation, Scan, Shoe, User

__all__ = [
    "User",
    "Scan",
    "Shoe",
    "Recommendation",
]
