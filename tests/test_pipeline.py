"""Tests for the end-to-end analysis pipeline."""

import json
from datetime import date, timedelta

import pytest

from stack_efficacy.analysis.correlation_analyzer import Direction, Significance
from stack_efficacy.analysis.effectiveness import Grade
from stack_efficacy.analysis.insights import InsightType
from stack_efficacy.analysis.metrics import Observation
from stack_efficacy.analysis.pipeline import StackAnalysisEngine, analyze_stack, select_window

START = date(2026, 3, 1)


def build_history():
    """Magnesium on days 7-13 lifts HRV 40 -> 50; caffeine on odd days drops sleep 8 -> 6."""
    observations = []
    interventions = {}
    for i in range(14):
        day = START + timedelta(days=i)
        taken = set()
        if i >= 7:
            taken.add('magnesium')
        if i % 2 == 1:
            taken.add('caffeine')
        if taken:
            interventions[day] = taken
        observations.append(Observation(
            date=day,
            metrics={
                'hrvAverage': 50 if 'magnesium' in taken else 40,
                'sleepScore': 6 if 'caffeine' in taken else 8,
            },
            provenance='garmin',
        ))
    return observations, interventions


class TestSelectWindow:
    """Test the rolling window selection."""

    def test_defaults_to_latest_observation(self):
        """The window ends at the latest observation date."""
        observations = [Observation(date=START + timedelta(days=i), metrics={'steps': 1000}) for i in range(40)]
        interventions = {START + timedelta(days=i): {'creatine'} for i in range(40)}

        obs, logged, start, end = select_window(observations, interventions, 30)

        assert end == START + timedelta(days=39)
        assert start == START + timedelta(days=10)
        assert len(obs) == 30
        assert len(logged) == 30
        assert min(logged) == start

    def test_explicit_end_date(self):
        """An explicit end date bounds both inputs."""
        observations = [Observation(date=START + timedelta(days=i), metrics={'steps': 1000}) for i in range(40)]

        obs, _, start, end = select_window(observations, {}, 7, end_date=START + timedelta(days=9))

        assert (start, end) == (START + timedelta(days=3), START + timedelta(days=9))
        assert [o.date for o in obs] == [START + timedelta(days=i) for i in range(3, 10)]

    def test_empty_input(self):
        """No observations and no end date gives an empty, unbounded window."""
        assert select_window([], {}, 30) == ([], {}, None, None)


class TestStackAnalysisEngine:
    """Test the full pipeline."""

    def setup_method(self):
        """Set up the engine with default tables."""
        self.engine = StackAnalysisEngine()

    def test_integration_scenario(self):
        """One positive and one negative signal surface with matching insights."""
        observations, interventions = build_history()

        report = self.engine.run(observations, interventions)

        assert [(r.intervention_id, r.metric) for r in report.results] == [
            ('caffeine', 'sleepScore'),
            ('magnesium', 'hrvAverage'),
        ]
        caffeine, magnesium = report.results
        assert caffeine.direction == Direction.NEGATIVE
        assert magnesium.direction == Direction.POSITIVE
        assert magnesium.significance == Significance.HIGH
        assert magnesium.confidence == 86

        types = [i.type for i in report.insights]
        assert types[:2] == [InsightType.POSITIVE, InsightType.WARNING]
        suggestions = [i.title for i in report.insights if i.type == InsightType.SUGGESTION]
        assert "💡 Consider Magnesium" not in suggestions
        assert "💡 Consider Magnesium glycinate" in suggestions

        assert report.effectiveness.score == 50
        assert report.effectiveness.grade == Grade.C
        assert report.days_observed == 14

    def test_insufficient_history(self):
        """Short histories produce no results and the neutral score."""
        observations, interventions = build_history()

        report = self.engine.run(observations[:5], interventions)

        assert report.results == []
        assert report.insights == []
        assert report.effectiveness.score == 50
        assert report.days_observed == 5

    def test_window_limits_analysis(self):
        """Only the last ``days`` days are screened."""
        observations, interventions = build_history()

        report = self.engine.run(observations, interventions, days=6)

        assert report.results == []
        assert report.window_start == START + timedelta(days=8)

    def test_empty_input(self):
        """An empty history still yields a well-formed report."""
        report = analyze_stack([], {})

        assert report.window_start is None
        assert report.results == []
        assert report.effectiveness.grade == Grade.C

    def test_display_names_flow_through(self):
        """Intervention names reach results and insights."""
        observations, interventions = build_history()

        report = self.engine.run(observations, interventions, intervention_names={'caffeine': 'Espresso'})

        assert report.results[0].display_name == 'Espresso'
        assert any(i.title == "⚠️ Review Espresso" for i in report.insights)

    def test_json_report(self):
        """The report serializes to plain JSON."""
        observations, interventions = build_history()

        data = json.loads(self.engine.run(observations, interventions, days=14).to_json())

        assert data['window'] == {'start_date': '2026-03-01', 'end_date': '2026-03-14', 'days_observed': 14}
        assert data['correlations'][1]['percent_difference'] == 25.0
        assert data['correlations'][0]['direction'] == 'negative'
        assert data['insights'][0]['type'] == 'positive'
        assert data['effectiveness']['grade'] == 'C'

    def test_default_window_reaches_before_first_observation(self):
        """The default window spans WINDOW_DAYS back from the latest observation."""
        observations, interventions = build_history()

        report = self.engine.run(observations, interventions)

        assert report.window_start == date(2026, 2, 13)
        assert report.window_end == date(2026, 3, 14)
        assert report.days_observed == 14

    def test_non_positive_days_rejected(self):
        """A window must cover at least one day."""
        observations, interventions = build_history()

        for days in (0, -3):
            with pytest.raises(ValueError, match="at least 1"):
                self.engine.run(observations, interventions, days=days)
