"""Pure response analytics shared by the API and the field client."""
from app.analytics.ranking import category_ratings, derive_top_ranked
from app.analytics.aggregation import DashboardKeys, aggregate

__all__ = [
    "category_ratings",
    "derive_top_ranked",
    "DashboardKeys",
    "aggregate",
]
