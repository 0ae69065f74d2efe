"""Biometric observations and the static metric definition tables."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Set


class Polarity(str, Enum):
    """Whether a higher or a lower value of a metric is the better outcome."""

    HIGHER_IS_BETTER = "higher-is-better"
    LOWER_IS_BETTER = "lower-is-better"


@dataclass(frozen=True)
class MetricDefinition:
    """Display and interpretation data for one wearable metric."""
    name: str
    display_label: str
    unit: str = ""
    polarity: Polarity = Polarity.HIGHER_IS_BETTER

    @property
    def lower_is_better(self) -> bool:
        return self.polarity == Polarity.LOWER_IS_BETTER

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'display_label': self.display_label,
            'unit': self.unit,
            'polarity': self.polarity.value,
        }


@dataclass
class Observation:
    """One calendar day of normalized wearable data.

    A metric that was not measured is either missing from ``metrics`` or
    mapped to ``None``; ``0.0`` is a real measurement.
    """
    date: date
    metrics: Dict[str, Optional[float]] = field(default_factory=dict)
    provenance: str = "unknown"  # 'garmin', 'healthconnect', 'apple_health', ...

    def value(self, metric: str) -> Optional[float]:
        return self.metrics.get(metric)

    @property
    def has_measurements(self) -> bool:
        return any(v is not None for v in self.metrics.values())

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'metrics': dict(self.metrics),
            'provenance': self.provenance,
        }


# Every metric the wearable sources normalize to (sleep/recovery/stress on a 0-10 scale)
METRIC_CATALOG: Dict[str, MetricDefinition] = {
    'sleepScore': MetricDefinition('sleepScore', 'Sleep quality', '/10'),
    'sleepDurationHours': MetricDefinition('sleepDurationHours', 'Sleep duration', 'h'),
    'deepSleepMinutes': MetricDefinition('deepSleepMinutes', 'Deep sleep', 'min'),
    'remSleepMinutes': MetricDefinition('remSleepMinutes', 'REM sleep', 'min'),
    'hrvAverage': MetricDefinition('hrvAverage', 'HRV', 'ms'),
    'restingHeartRate': MetricDefinition(
        'restingHeartRate', 'Resting heart rate', 'bpm', Polarity.LOWER_IS_BETTER
    ),
    'recoveryScore': MetricDefinition('recoveryScore', 'Recovery', '/10'),
    'stressLevel': MetricDefinition('stressLevel', 'Stress', '/10', Polarity.LOWER_IS_BETTER),
    'steps': MetricDefinition('steps', 'Steps', ''),
    'activeMinutes': MetricDefinition('activeMinutes', 'Activity', 'min'),
    'bodyBatteryHigh': MetricDefinition('bodyBatteryHigh', 'Energy peak', '%'),
}

# Metrics screened by default
DEFAULT_METRIC_NAMES = (
    'sleepScore',
    'deepSleepMinutes',
    'hrvAverage',
    'recoveryScore',
    'stressLevel',
)

DEFAULT_METRICS: List[MetricDefinition] = [METRIC_CATALOG[name] for name in DEFAULT_METRIC_NAMES]


def get_metric_definitions(names: Optional[Iterable[str]] = None) -> List[MetricDefinition]:
    """Look up catalog definitions by name, preserving the requested order.

    Raises:
        KeyError: if a name is not in the catalog
    """
    if names is None:
        return list(DEFAULT_METRICS)

    definitions = []
    for name in names:
        if name not in METRIC_CATALOG:
            raise KeyError(f"Unknown metric '{name}'. Known: {', '.join(METRIC_CATALOG)}")
        definitions.append(METRIC_CATALOG[name])
    return definitions


def metric_label(metric: str, definitions: Optional[Iterable[MetricDefinition]] = None) -> str:
    """Display label for a metric, falling back to the catalog and then the raw name."""
    for definition in definitions or ():
        if definition.name == metric:
            return definition.display_label
    if metric in METRIC_CATALOG:
        return METRIC_CATALOG[metric].display_label
    return metric


def observed_days(observations: Iterable[Observation]) -> Set[date]:
    """Distinct dates carrying at least one measured metric."""
    return {obs.date for obs in observations if obs.has_measurements}


def index_by_date(observations: Iterable[Observation]) -> Mapping[date, Observation]:
    return {obs.date: obs for obs in observations}
