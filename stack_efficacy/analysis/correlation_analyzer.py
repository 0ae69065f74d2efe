"""
Intervention/metric correlation screening.

For every (intervention, metric) pair seen in the analysis window the days
are split into a "with" group (intervention logged, metric measured) and a
"without" group (intervention not logged, metric measured). The two group
means are compared and the pair is kept only when the relative difference
and the sample size clear one of the significance tiers:

    high    |diff%| >= 15 and n >= 14
    medium  |diff%| >= 10 and n >= 10
    low     |diff%| >= 5  and n >= 7

These are descriptive, sample-size-gated signals, not causal estimates.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from ..config import config
from .metrics import MetricDefinition, Observation, observed_days


class Direction(str, Enum):
    """Whether the intervention days look better, worse or no different."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Significance(str, Enum):
    """Significance tier from effect size and sample size."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1, "none": 0}[self.value]

    @property
    def weight(self) -> int:
        """Weight used by the effectiveness score."""
        return self.rank


@dataclass(frozen=True)
class AnalyzerSettings:
    """Screening thresholds. Defaults come from the environment config."""
    min_history_days: int = field(default_factory=lambda: config.MIN_HISTORY_DAYS)
    min_group_samples: int = field(default_factory=lambda: config.MIN_GROUP_SAMPLES)
    neutral_band_pct: float = field(default_factory=lambda: config.NEUTRAL_BAND_PCT)
    high: Tuple[float, int] = field(default_factory=lambda: config.get_significance_threshold("high"))
    medium: Tuple[float, int] = field(default_factory=lambda: config.get_significance_threshold("medium"))
    low: Tuple[float, int] = field(default_factory=lambda: config.get_significance_threshold("low"))
    sample_saturation: int = field(default_factory=lambda: config.CONFIDENCE_SAMPLE_SATURATION)
    effect_saturation: float = field(default_factory=lambda: config.CONFIDENCE_EFFECT_SATURATION)


@dataclass(frozen=True)
class CorrelationResult:
    """A screened comparison of one metric on days with vs without one intervention."""
    intervention_id: str
    metric: str
    mean_with: float
    mean_without: float
    sample_size_with: int
    sample_size_without: int
    percent_difference: float
    direction: Direction
    significance: Significance
    confidence: int  # 0-100
    intervention_name: str = ""
    metric_label: str = ""

    @property
    def total_samples(self) -> int:
        return self.sample_size_with + self.sample_size_without

    @property
    def display_name(self) -> str:
        return self.intervention_name or self.intervention_id

    @property
    def display_metric(self) -> str:
        return self.metric_label or self.metric

    @property
    def emoji(self) -> str:
        if self.direction == Direction.NEGATIVE:
            return "⚠️"
        if self.direction != Direction.POSITIVE:
            return "📊"
        metric = self.metric.lower()
        if "sleep" in metric:
            return "😴"
        if "hrv" in metric or "recovery" in metric:
            return "💪"
        if "stress" in metric:
            return "🧘"
        return "✨"

    @property
    def message(self) -> str:
        pct = abs(round(self.percent_difference))
        if self.direction == Direction.POSITIVE:
            return f"{self.display_name} correlates with {pct}% better {self.display_metric}"
        if self.direction == Direction.NEGATIVE:
            return f"{self.display_name} shows {pct}% worse {self.display_metric}"
        return f"{self.display_name} has no measurable effect on {self.display_metric}"

    def to_dict(self) -> dict:
        return {
            'intervention_id': self.intervention_id,
            'intervention_name': self.display_name,
            'metric': self.metric,
            'metric_label': self.display_metric,
            'mean_with': round(self.mean_with, 1),
            'mean_without': round(self.mean_without, 1),
            'sample_size_with': int(self.sample_size_with),
            'sample_size_without': int(self.sample_size_without),
            'percent_difference': round(self.percent_difference, 1),
            'direction': self.direction.value,
            'significance': self.significance.value,
            'confidence': int(self.confidence),
            'emoji': self.emoji,
            'message': self.message,
        }


def round_half_up(value: float) -> int:
    """Round halves upwards (0.5 -> 1, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def percent_difference(mean_with: float, mean_without: float) -> float:
    """Relative change of the with-group mean against the without-group baseline.

    A zero baseline yields 0 rather than an infinite ratio.
    """
    if mean_without == 0:
        return 0.0
    return (mean_with - mean_without) / mean_without * 100


class CorrelationAnalyzer:
    """Screen every intervention against every configured metric."""

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()
        self.logger = logging.getLogger(__name__)

    def analyze(
        self,
        observations: Iterable[Observation],
        interventions_by_date: Mapping[date, Iterable[str]],
        metric_definitions: Iterable[MetricDefinition],
        intervention_names: Optional[Mapping[str, str]] = None,
    ) -> List[CorrelationResult]:
        """
        Compute the screened correlation results.

        Args:
            observations: One record per day; at most one per date
            interventions_by_date: date -> intervention ids logged that day
            metric_definitions: Metrics to screen, with their polarity
            intervention_names: Optional id -> display name mapping

        Returns:
            Results sorted by significance, then confidence (both descending)
        """
        observations = list(observations)
        definitions = list(metric_definitions)
        names = intervention_names or {}

        n_days = len(observed_days(observations))
        if n_days < self.settings.min_history_days:
            self.logger.info(
                f"Only {n_days} observed days, need {self.settings.min_history_days}. Skipping analysis."
            )
            return []

        data = self._build_frame(observations, definitions)
        logged = {
            day: set(ids) for day, ids in interventions_by_date.items()
        }
        intervention_ids = sorted({i for ids in logged.values() for i in ids})

        results = []
        for intervention_id in intervention_ids:
            taken = data.index.map(lambda d: intervention_id in logged.get(d, ())).to_numpy(dtype=bool)

            for definition in definitions:
                result = self._compare(
                    data[definition.name], taken, intervention_id, definition,
                    names.get(intervention_id, intervention_id),
                )
                if result is not None:
                    results.append(result)

        results = sort_results(results)
        self.logger.info(
            f"Screened {len(intervention_ids)} interventions x {len(definitions)} metrics "
            f"over {n_days} days: {len(results)} significant correlations"
        )
        return results

    def _build_frame(
        self,
        observations: List[Observation],
        definitions: List[MetricDefinition],
    ) -> pd.DataFrame:
        """One row per observed date, one float column per metric (NaN = not measured)."""
        rows = []
        for obs in observations:
            row = {'date': obs.date}
            for definition in definitions:
                value = obs.value(definition.name)
                row[definition.name] = np.nan if value is None else float(value)
            rows.append(row)

        columns = ['date'] + [d.name for d in definitions]
        df = pd.DataFrame(rows, columns=columns)
        return df.set_index('date')

    def _compare(
        self,
        values: pd.Series,
        taken: np.ndarray,
        intervention_id: str,
        definition: MetricDefinition,
        intervention_name: str,
    ) -> Optional[CorrelationResult]:
        measured = values.notna().to_numpy()
        with_group = values[taken & measured]
        without_group = values[~taken & measured]

        min_samples = self.settings.min_group_samples
        if len(with_group) < min_samples or len(without_group) < min_samples:
            self.logger.debug(
                f"Skipping {intervention_id}/{definition.name}: "
                f"{len(with_group)} with, {len(without_group)} without"
            )
            return None

        mean_with = float(with_group.mean())
        mean_without = float(without_group.mean())
        diff = mean_with - mean_without
        pct = percent_difference(mean_with, mean_without)
        total_samples = len(with_group) + len(without_group)

        direction = self._direction(diff, pct, definition)
        significance = self._significance(pct, total_samples)
        if significance == Significance.NONE:
            return None

        return CorrelationResult(
            intervention_id=intervention_id,
            metric=definition.name,
            mean_with=mean_with,
            mean_without=mean_without,
            sample_size_with=len(with_group),
            sample_size_without=len(without_group),
            percent_difference=pct,
            direction=direction,
            significance=significance,
            confidence=self._confidence(total_samples, pct),
            intervention_name=intervention_name,
            metric_label=definition.display_label,
        )

    def _direction(self, diff: float, pct: float, definition: MetricDefinition) -> Direction:
        """Sign of the difference, inverted for lower-is-better metrics."""
        if abs(pct) < self.settings.neutral_band_pct:
            return Direction.NEUTRAL

        improved = diff > 0
        if definition.lower_is_better:
            improved = diff < 0

        if improved:
            return Direction.POSITIVE
        if diff == 0:
            return Direction.NEUTRAL
        return Direction.NEGATIVE

    def _significance(self, pct: float, total_samples: int) -> Significance:
        magnitude = abs(pct)
        for tier, (min_pct, min_samples) in (
            (Significance.HIGH, self.settings.high),
            (Significance.MEDIUM, self.settings.medium),
            (Significance.LOW, self.settings.low),
        ):
            if magnitude >= min_pct and total_samples >= min_samples:
                return tier
        return Significance.NONE

    def _confidence(self, total_samples: int, pct: float) -> int:
        raw = (
            total_samples / self.settings.sample_saturation * 50
            + abs(pct) / self.settings.effect_saturation * 50
        )
        return min(100, round_half_up(raw))


def sort_results(results: Iterable[CorrelationResult]) -> List[CorrelationResult]:
    """Order by significance tier, then confidence; stable for ties."""
    return sorted(
        results,
        key=lambda r: (r.significance.rank, r.confidence),
        reverse=True,
    )


def analyze(
    observations: Iterable[Observation],
    interventions_by_date: Mapping[date, Iterable[str]],
    metric_definitions: Iterable[MetricDefinition],
    settings: Optional[AnalyzerSettings] = None,
    intervention_names: Optional[Mapping[str, str]] = None,
) -> List[CorrelationResult]:
    """
    Convenience function to run the correlation screen.

    Returns:
        Ordered list of significant correlation results
    """
    analyzer = CorrelationAnalyzer(settings=settings)
    return analyzer.analyze(
        observations, interventions_by_date, metric_definitions,
        intervention_names=intervention_names,
    )
