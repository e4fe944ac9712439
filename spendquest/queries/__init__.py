"""Query package."""

from spendquest.queries.aggregation import AggregationEngine, budget_ratio

__all__ = ["AggregationEngine", "budget_ratio"]
