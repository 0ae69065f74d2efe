"""
Mock wearable data for demos and tests.

Simulates realistic Garmin/Whoop/Oura style daily records, including
built-in relationships:
- Poor sleep -> lower recovery, higher stress
- Recovery drives HRV
- Magnesium improves sleep, ashwagandha lowers stress,
  creatine raises activity, omega-3 raises HRV
"""

from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

import numpy as np

from .metrics import Observation

# Baseline values for a typical user
BASELINE = {
    'sleepScore': 7.2,
    'sleepDurationHours': 7.5,
    'deepSleepMinutes': 85,
    'remSleepMinutes': 95,
    'hrvAverage': 45,
    'restingHeartRate': 58,
    'bodyBatteryHigh': 85,
    'recoveryScore': 7.5,
    'stressLevel': 3.5,
    'steps': 8500,
    'activeMinutes': 45,
}

# Per-intervention shifts applied to the baseline
INTERVENTION_EFFECTS = {
    'magnesium': 0.8,     # sleep score
    'ashwagandha': -0.5,  # stress level
    'creatine': 0.3,      # activity, resting HR
    'omega-3': 0.4,       # HRV
}

ScheduleRule = Union[float, Callable[[date, int], bool]]


def _vary(rng: np.random.Generator, base: float, variance: float) -> float:
    return round(float(base + rng.uniform(-variance, variance)), 1)


def _vary_int(rng: np.random.Generator, base: float, variance: float) -> int:
    return int(round(base + rng.uniform(-variance, variance)))


def generate_mock_day(
    day: date,
    interventions: Iterable[str] = (),
    rng: Optional[np.random.Generator] = None,
    provenance: str = "mock",
) -> Observation:
    """Generate one day of mock wearable data for the given interventions."""
    rng = rng or np.random.default_rng()
    taken = set(interventions)

    weekend_bonus = 0.5 if day.weekday() >= 5 else 0.0
    magnesium = INTERVENTION_EFFECTS['magnesium'] if 'magnesium' in taken else 0.0
    ashwagandha = INTERVENTION_EFFECTS['ashwagandha'] if 'ashwagandha' in taken else 0.0
    creatine = INTERVENTION_EFFECTS['creatine'] if 'creatine' in taken else 0.0
    omega3 = INTERVENTION_EFFECTS['omega-3'] if 'omega-3' in taken else 0.0

    sleep_score = float(np.clip(
        _vary(rng, BASELINE['sleepScore'] + weekend_bonus + magnesium, 1.5), 1, 10
    ))

    # Recovery follows sleep
    recovery_score = float(np.clip(sleep_score * 0.8 + _vary(rng, 2, 0.5), 1, 10))

    # Stress is inverse to sleep
    stress_level = float(np.clip(10 - sleep_score * 0.6 + _vary(rng, 0, 1) + ashwagandha, 1, 10))

    hrv_base = BASELINE['hrvAverage'] + (recovery_score - 7.5) * 5 + omega3 * 3

    metrics = {
        'sleepScore': sleep_score,
        'sleepDurationHours': _vary(
            rng, BASELINE['sleepDurationHours'] + weekend_bonus * 0.5 + magnesium * 0.3, 1
        ),
        'deepSleepMinutes': _vary_int(rng, BASELINE['deepSleepMinutes'] + magnesium * 10, 20),
        'remSleepMinutes': _vary_int(rng, BASELINE['remSleepMinutes'], 15),
        'hrvAverage': _vary_int(rng, hrv_base, 8),
        'restingHeartRate': _vary_int(rng, BASELINE['restingHeartRate'] - creatine * 2, 5),
        'bodyBatteryHigh': _vary_int(rng, BASELINE['bodyBatteryHigh'] + recovery_score * 2, 10),
        'recoveryScore': recovery_score,
        'stressLevel': stress_level,
        'steps': _vary_int(rng, BASELINE['steps'] + (-2000 if weekend_bonus else 0), 3000),
        'activeMinutes': _vary_int(rng, BASELINE['activeMinutes'] + creatine * 5, 20),
    }
    return Observation(date=day, metrics=metrics, provenance=provenance)


def _is_taken(rule: ScheduleRule, day: date, index: int, rng: np.random.Generator) -> bool:
    if callable(rule):
        return bool(rule(day, index))
    return bool(rng.random() < float(rule))


def generate_mock_history(
    days: int = 14,
    schedule: Optional[Mapping[str, ScheduleRule]] = None,
    end_date: Optional[date] = None,
    seed: Optional[int] = None,
) -> Tuple[List[Observation], Dict[date, Set[str]]]:
    """
    Generate a mock history ending at ``end_date`` (default: today).

    Args:
        days: Number of consecutive days
        schedule: intervention id -> probability of being taken, or a
            ``(day, index) -> bool`` predicate
        end_date: Last day of the history
        seed: Seed for reproducible output

    Returns:
        (observations, interventions_by_date)
    """
    rng = np.random.default_rng(seed)
    end_date = end_date or date.today()
    schedule = schedule or {}

    observations = []
    interventions_by_date = {}
    for index in range(days):
        day = end_date - timedelta(days=days - 1 - index)
        taken = {
            intervention for intervention, rule in sorted(schedule.items())
            if _is_taken(rule, day, index, rng)
        }
        if taken:
            interventions_by_date[day] = taken
        observations.append(generate_mock_day(day, taken, rng))

    return observations, interventions_by_date


DEMO_SCHEDULE = {
    'magnesium': lambda day, index: index % 2 == 0,
    'ashwagandha': 0.5,
    'creatine': lambda day, index: day.weekday() < 5,
}
