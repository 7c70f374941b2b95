"""Dashboard aggregation engine.

Turns an ordered sequence of response snapshots into dashboard statistics.
The input is never mutated, nothing depends on wall-clock time, and every
statistic degrades to a fixed zero state on empty input.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from app.analytics.ranking import category_ratings
from app.schemas.analytics import (
    DashboardSummary,
    EarlyAdopterStats,
    EMPTY_TOP_PROBLEM,
    RATING_BUCKETS,
    ResponseSnapshot,
    empty_histogram,
)
from app.schemas.response import MultipleChoiceAnswer, OpenEndedAnswer, RatingAnswer, TextAnswer

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class DashboardKeys:
    """Answer keys the dashboard reads its single-question statistics from."""
    satisfaction: str = "satisfaction"
    adoption_likelihood: str = "adoption_likelihood"
    willingness_to_pay: str = "willingness_to_pay"
    early_adopter: str = "interested_in_trying"


def format_one_decimal(total, count: int) -> str:
    """Mean formatted with one decimal, halves rounded up; "0.0" when count is 0."""
    if count == 0:
        return "0.0"
    mean = Decimal(total) / Decimal(count)
    return str(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def round_percentage(part: int, whole: int) -> int:
    """Percentage rounded half up (Math.round semantics) using exact integers."""
    if whole == 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def _as_rating(answer) -> Optional[int]:
    if isinstance(answer, RatingAnswer):
        value = answer.value
    elif isinstance(answer, (TextAnswer, MultipleChoiceAnswer)) and isinstance(answer.value, str):
        try:
            value = int(answer.value.strip())
        except ValueError:
            return None
    else:
        return None
    return value if value in RATING_BUCKETS else None


def _as_text(answer) -> str:
    if isinstance(answer, (TextAnswer, OpenEndedAnswer)):
        return answer.value
    if isinstance(answer, MultipleChoiceAnswer):
        if isinstance(answer.value, list):
            return ", ".join(answer.value)
        return answer.value
    if isinstance(answer, RatingAnswer):
        return str(answer.value) if answer.value else ""
    return ""


def _weighted_mean(histogram: Dict[int, int]) -> str:
    count = sum(histogram.values())
    total = sum(bucket * hits for bucket, hits in histogram.items())
    return format_one_decimal(total, count)


def aggregate(responses: Iterable[ResponseSnapshot], keys: DashboardKeys = DashboardKeys()) -> DashboardSummary:
    """
    Summarize responses for the dashboard.

    Ties (top problem, category ordering) resolve by first appearance in the
    given order, so the same ordered input always yields the same output.
    """
    snapshots: List[ResponseSnapshot] = list(responses)
    if not snapshots:
        return DashboardSummary()

    severity_total = 0
    severity_count = 0
    top_problems: Dict[str, int] = {}
    problem_distribution: Dict[str, int] = {}
    severity_sums: Dict[str, List[int]] = {}
    satisfaction = empty_histogram()
    adoption_likelihood = empty_histogram()
    willingness_to_pay: Dict[str, int] = {}
    early_yes = 0
    early_no = 0
    completion_total = Decimal(0)
    completion_count = 0
    devices = set()
    by_date: Dict[str, int] = {}

    for snapshot in snapshots:
        answers = snapshot.answers

        for category, rating in category_ratings(answers).items():
            if rating <= 0:
                continue
            severity_total += rating
            severity_count += 1
            problem_distribution[category] = problem_distribution.get(category, 0) + 1
            bucket = severity_sums.setdefault(category, [0, 0])
            bucket[0] += rating
            bucket[1] += 1

        if snapshot.top_ranked:
            leader = snapshot.top_ranked[0].category
            top_problems[leader] = top_problems.get(leader, 0) + 1

        rating = _as_rating(answers.get(keys.satisfaction))
        if rating is not None:
            satisfaction[rating] += 1

        rating = _as_rating(answers.get(keys.adoption_likelihood))
        if rating is not None:
            adoption_likelihood[rating] += 1

        # Raw text buckets: "R50" and "50" stay distinct
        price = _as_text(answers.get(keys.willingness_to_pay))
        if price:
            willingness_to_pay[price] = willingness_to_pay.get(price, 0) + 1

        interest = _as_text(answers.get(keys.early_adopter))
        if interest:
            if interest == "yes":
                early_yes += 1
            else:
                early_no += 1

        if snapshot.completion_time_seconds is not None:
            completion_total += Decimal(str(snapshot.completion_time_seconds))
            completion_count += 1

        if snapshot.device_id:
            devices.add(snapshot.device_id)

        if snapshot.collected_on is not None:
            day = snapshot.collected_on.isoformat()
            by_date[day] = by_date.get(day, 0) + 1

    top_problem = EMPTY_TOP_PROBLEM
    best = 0
    for category, count in top_problems.items():
        if count > best:
            best = count
            top_problem = category

    return DashboardSummary(
        total_responses=len(snapshots),
        # Every stored response is complete by construction
        completion_rate="100%",
        avg_problem_severity=format_one_decimal(severity_total, severity_count),
        top_problem=top_problem,
        top_problems=top_problems,
        problem_distribution=problem_distribution,
        severity_by_category={
            category: format_one_decimal(total, count)
            for category, (total, count) in severity_sums.items()
        },
        satisfaction=satisfaction,
        adoption_likelihood=adoption_likelihood,
        avg_satisfaction=_weighted_mean(satisfaction),
        avg_adoption_likelihood=_weighted_mean(adoption_likelihood),
        willingness_to_pay=willingness_to_pay,
        early_adopter=EarlyAdopterStats(
            yes=early_yes,
            no=early_no,
            rate=f"{round_percentage(early_yes, early_yes + early_no)}%",
        ),
        avg_completion_time=float(format_one_decimal(completion_total, completion_count)),
        unique_devices=len(devices),
        responses_by_date=dict(sorted(by_date.items())),
    )
