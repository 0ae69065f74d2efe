"""End-to-end stack analysis over a rolling window."""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..config import config
from .correlation_analyzer import AnalyzerSettings, CorrelationAnalyzer, CorrelationResult
from .effectiveness import EffectivenessScore, EffectivenessScorer
from .insights import Insight, InsightGenerator
from .metrics import DEFAULT_METRICS, MetricDefinition, Observation, observed_days
from .registry import DEFAULT_REGISTRY, EffectRegistry


@dataclass
class AnalysisReport:
    """Everything one invocation produces."""
    window_start: Optional[date]
    window_end: Optional[date]
    days_observed: int
    results: List[CorrelationResult] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)
    effectiveness: Optional[EffectivenessScore] = None

    def to_dict(self) -> dict:
        return {
            'window': {
                'start_date': self.window_start.isoformat() if self.window_start else None,
                'end_date': self.window_end.isoformat() if self.window_end else None,
                'days_observed': self.days_observed,
            },
            'correlations': [r.to_dict() for r in self.results],
            'insights': [i.to_dict() for i in self.insights],
            'effectiveness': self.effectiveness.to_dict() if self.effectiveness else None,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def select_window(
    observations: Iterable[Observation],
    interventions_by_date: Mapping[date, Iterable[str]],
    days: int,
    end_date: Optional[date] = None,
) -> Tuple[List[Observation], Dict[date, Set[str]], Optional[date], Optional[date]]:
    """
    Restrict both inputs to the ``days``-long window ending at ``end_date``.

    ``end_date`` defaults to the latest observation date.

    Returns:
        (observations, interventions_by_date, window_start, window_end)
    """
    observations = sorted(observations, key=lambda o: o.date)
    if end_date is None:
        if not observations:
            return [], {}, None, None
        end_date = observations[-1].date

    start_date = end_date - timedelta(days=days - 1)
    in_window = [o for o in observations if start_date <= o.date <= end_date]
    interventions = {
        day: set(ids) for day, ids in interventions_by_date.items()
        if start_date <= day <= end_date
    }
    return in_window, interventions, start_date, end_date


class StackAnalysisEngine:
    """Analyzer, insight generator and scorer wired to one set of static tables."""

    def __init__(
        self,
        metric_definitions: Optional[Iterable[MetricDefinition]] = None,
        registry: Optional[EffectRegistry] = None,
        settings: Optional[AnalyzerSettings] = None,
    ):
        self.metric_definitions = list(metric_definitions or DEFAULT_METRICS)
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.analyzer = CorrelationAnalyzer(settings=settings)
        self.insight_generator = InsightGenerator(
            registry=self.registry, metric_definitions=self.metric_definitions
        )
        self.scorer = EffectivenessScorer()
        self.logger = logging.getLogger(__name__)

    def run(
        self,
        observations: Iterable[Observation],
        interventions_by_date: Mapping[date, Iterable[str]],
        days: Optional[int] = None,
        end_date: Optional[date] = None,
        intervention_names: Optional[Mapping[str, str]] = None,
    ) -> AnalysisReport:
        """
        Run the full pipeline for one rolling window.

        Args:
            observations: Daily wearable records
            interventions_by_date: date -> intervention ids logged that day
            days: Window length (default: config.WINDOW_DAYS)
            end_date: Last day of the window (default: latest observation)
            intervention_names: Optional id -> display name mapping

        Returns:
            AnalysisReport with correlations, insights and effectiveness score

        Raises:
            ValueError: if ``days`` is less than 1
        """
        if days is None:
            days = config.WINDOW_DAYS
        if days < 1:
            raise ValueError(f"Window must be at least 1 day, got {days}")

        window_obs, window_interventions, start, end = select_window(
            observations, interventions_by_date, days, end_date
        )
        self.logger.info(f"Analyzing {len(window_obs)} daily records ({start} to {end}, {days} days)")

        results = self.analyzer.analyze(
            window_obs, window_interventions, self.metric_definitions,
            intervention_names=intervention_names,
        )
        return AnalysisReport(
            window_start=start,
            window_end=end,
            days_observed=len(observed_days(window_obs)),
            results=results,
            insights=self.insight_generator.generate(results),
            effectiveness=self.scorer.score(results),
        )


def analyze_stack(
    observations: Iterable[Observation],
    interventions_by_date: Mapping[date, Iterable[str]],
    days: Optional[int] = None,
    end_date: Optional[date] = None,
    intervention_names: Optional[Mapping[str, str]] = None,
) -> AnalysisReport:
    """Convenience function running the engine with the default tables."""
    return StackAnalysisEngine().run(
        observations, interventions_by_date, days=days, end_date=end_date,
        intervention_names=intervention_names,
    )
