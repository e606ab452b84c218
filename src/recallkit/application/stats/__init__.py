# Application Stats Package
from .metrics_calculator import CardInsights, DifficultyBreakdown, MetricsCalculator
from .service import StatsService, StudyOverview

__all__ = [
    "MetricsCalculator",
    "CardInsights",
    "DifficultyBreakdown",
    "StatsService",
    "StudyOverview",
]
