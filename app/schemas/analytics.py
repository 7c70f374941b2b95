"""Dashboard aggregation schemas."""
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.schemas.response import Answer, TopRankedItem

EMPTY_TOP_PROBLEM = "-"
RATING_BUCKETS = (1, 2, 3, 4, 5)


def empty_histogram() -> Dict[int, int]:
    return {bucket: 0 for bucket in RATING_BUCKETS}


class ResponseSnapshot(BaseModel):
    """Read-only view of a response as consumed by the aggregation engine."""
    answers: Dict[str, Answer] = {}
    top_ranked: List[TopRankedItem] = []
    device_id: Optional[str] = None
    completion_time_seconds: Optional[float] = None
    collected_on: Optional[date] = None


class EarlyAdopterStats(BaseModel):
    yes: int = 0
    no: int = 0
    rate: str = "0%"


class DashboardSummary(BaseModel):
    """Dashboard statistics. Every field has a defined zero state."""
    total_responses: int = 0
    completion_rate: str = "0%"
    avg_problem_severity: str = "0.0"
    top_problem: str = EMPTY_TOP_PROBLEM
    top_problems: Dict[str, int] = {}
    problem_distribution: Dict[str, int] = {}
    severity_by_category: Dict[str, str] = {}
    satisfaction: Dict[int, int] = Field(default_factory=empty_histogram)
    adoption_likelihood: Dict[int, int] = Field(default_factory=empty_histogram)
    avg_satisfaction: str = "0.0"
    avg_adoption_likelihood: str = "0.0"
    willingness_to_pay: Dict[str, int] = {}
    early_adopter: EarlyAdopterStats = EarlyAdopterStats()
    avg_completion_time: float = 0.0
    unique_devices: int = 0
    responses_by_date: Dict[str, int] = {}
