"""Services for scheduling logic."""

from .placement import MovePlan, PlacementError, plan_block_move, plan_manual_block
from .recommend import AssignmentRecommendation, ScoreBreakdown, recommend_engineers
from .timeplan import business_days_between, parse_working_days, week_start

__all__ = [
    "AssignmentRecommendation",
    "ScoreBreakdown",
    "recommend_engineers",
    "MovePlan",
    "PlacementError",
    "plan_block_move",
    "plan_manual_block",
    "business_days_between",
    "parse_working_days",
    "week_start",
]
