from app.analytics.ranking import category_ratings, derive_top_ranked
from app.schemas.response import RankingAnswer, RatingAnswer, TextAnswer


def ranked(answers):
    return [(item.category, item.rating) for item in derive_top_ranked(answers)]


def test_ties_keep_first_seen_order():
    answers = {"problems": RankingAnswer(ratings={"A": 5, "B": 5, "C": 3, "D": 5})}
    assert ranked(answers) == [("A", 5), ("B", 5), ("D", 5)]


def test_not_alphabetical():
    answers = {"problems": RankingAnswer(ratings={"zeta": 4, "alpha": 4, "mid": 2})}
    assert ranked(answers) == [("zeta", 4), ("alpha", 4), ("mid", 2)]


def test_limited_to_three_and_skips_unrated():
    answers = {"problems": RankingAnswer(ratings={"a": 1, "b": 0, "c": 2, "d": 3, "e": 4})}
    assert ranked(answers) == [("e", 4), ("d", 3), ("c", 2)]


def test_fewer_than_three_rated():
    assert ranked({"problems": RankingAnswer(ratings={"only": 2})}) == [("only", 2)]
    assert ranked({}) == []


def test_ratings_merge_across_ranking_answers():
    answers = {
        "name": TextAnswer(value="Thandi"),
        "section_one": RankingAnswer(ratings={"transport": 3}),
        "overall": RatingAnswer(value=5),
        "section_two": RankingAnswer(ratings={"food": 5}),
    }
    assert category_ratings(answers) == {"transport": 3, "food": 5}
    assert ranked(answers) == [("food", 5), ("transport", 3)]
