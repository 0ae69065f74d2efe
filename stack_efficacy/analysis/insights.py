"""Actionable insights generated from screened correlation results."""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Iterable, List, Optional

from ..config import config
from .correlation_analyzer import CorrelationResult, Direction
from .metrics import MetricDefinition, metric_label
from .registry import DEFAULT_REGISTRY, EffectRegistry


class InsightType(str, Enum):
    """Insight categories, in output order."""

    POSITIVE = "positive"
    WARNING = "warning"
    SUGGESTION = "suggestion"


@dataclass
class Insight:
    """A human-readable statement derived from the correlation results."""
    type: InsightType
    title: str
    description: str
    intervention_id: Optional[str] = None
    metric: Optional[str] = None
    action_label: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data['type'] = self.type.value
        return data


class InsightGenerator:
    """Turn correlation results into positive, warning and suggestion insights."""

    def __init__(
        self,
        registry: Optional[EffectRegistry] = None,
        metric_definitions: Optional[Iterable[MetricDefinition]] = None,
        max_positive: Optional[int] = None,
    ):
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.metric_definitions = list(metric_definitions or [])
        self.max_positive = config.MAX_POSITIVE_INSIGHTS if max_positive is None else max_positive
        self.logger = logging.getLogger(__name__)

    def generate(self, results: List[CorrelationResult]) -> List[Insight]:
        """
        Generate insights in a fixed group order: positives, warnings, suggestions.

        Args:
            results: Correlation results in analyzer order

        Returns:
            List of insights (not re-sorted)
        """
        insights = []
        insights.extend(self._positive_insights(results))
        insights.extend(self._warning_insights(results))
        insights.extend(self._suggestion_insights(results))

        self.logger.debug(f"Generated {len(insights)} insights from {len(results)} results")
        return insights

    def _positive_insights(self, results: List[CorrelationResult]) -> List[Insight]:
        positives = [r for r in results if r.direction == Direction.POSITIVE][:self.max_positive]
        return [
            Insight(
                type=InsightType.POSITIVE,
                title=f"{r.emoji} {r.display_name} works!",
                description=r.message,
                intervention_id=r.intervention_id,
                metric=r.metric,
            )
            for r in positives
        ]

    def _warning_insights(self, results: List[CorrelationResult]) -> List[Insight]:
        return [
            Insight(
                type=InsightType.WARNING,
                title=f"⚠️ Review {r.display_name}",
                description=f"{r.message}. Consider adjusting timing or dosage.",
                intervention_id=r.intervention_id,
                metric=r.metric,
                action_label="Check timing",
            )
            for r in results
            if r.direction == Direction.NEGATIVE
        ]

    def _suggestion_insights(self, results: List[CorrelationResult]) -> List[Insight]:
        """Suggest known interventions the user is not taking that target a weak metric."""
        covered = self.registry.covers(r.intervention_id for r in results)
        negatives = [r for r in results if r.direction == Direction.NEGATIVE]

        suggestions = []
        for effect in self.registry:
            if effect.key in covered:
                continue

            weak = [r for r in negatives if r.metric in effect.expected_metrics]
            if not weak:
                continue

            label = weak[0].metric_label or metric_label(weak[0].metric, self.metric_definitions)
            suggestions.append(Insight(
                type=InsightType.SUGGESTION,
                title=f"💡 Consider {effect.name}",
                description=f"Could improve your {label}.",
                metric=weak[0].metric,
                action_label="Open library",
            ))

        return suggestions


def generate_insights(
    results: List[CorrelationResult],
    registry: Optional[EffectRegistry] = None,
    metric_definitions: Optional[Iterable[MetricDefinition]] = None,
) -> List[Insight]:
    """Convenience function to generate insights with the default registry."""
    return InsightGenerator(registry=registry, metric_definitions=metric_definitions).generate(results)
