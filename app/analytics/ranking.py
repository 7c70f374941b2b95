"""Top-ranked category derivation."""
from typing import Dict, List, Mapping

from app.schemas.response import RankingAnswer, TopRankedItem

TOP_RANKED_LIMIT = 3


def category_ratings(answers: Mapping[str, object]) -> Dict[str, int]:
    """
    Collect per-category ratings from every ranking answer.

    Categories keep the order in which they were first rated.
    """
    ratings: Dict[str, int] = {}
    for answer in answers.values():
        if isinstance(answer, RankingAnswer):
            ratings.update(answer.ratings)
    return ratings


def derive_top_ranked(answers: Mapping[str, object]) -> List[TopRankedItem]:
    """
    Return at most three rated categories, highest rating first.

    Unrated (0) categories are skipped. ``sorted`` is stable, so equal
    ratings stay in first-rated order rather than alphabetical order.
    """
    rated = [(category, rating) for category, rating in category_ratings(answers).items() if rating > 0]
    ranked = sorted(rated, key=lambda item: item[1], reverse=True)
    return [TopRankedItem(category=category, rating=rating) for category, rating in ranked[:TOP_RANKED_LIMIT]]
