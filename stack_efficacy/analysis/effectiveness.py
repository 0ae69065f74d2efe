"""Aggregate stack effectiveness score."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..config import config
from .correlation_analyzer import CorrelationResult, Direction, round_half_up

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_SUMMARY = "Insufficient data for an effectiveness assessment."


class Grade(str, Enum):
    """Letter grade for the effectiveness score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


@dataclass
class EffectivenessScore:
    """Net direction and strength of all screened correlations."""
    score: int  # 0-100
    grade: Grade
    summary: str

    def to_dict(self) -> dict:
        return {
            'score': int(self.score),
            'grade': self.grade.value,
            'summary': self.summary,
        }


def grade_for_score(score: int) -> Grade:
    """Map a 0-100 score onto the fixed grade cutoffs."""
    for letter in ("A", "B", "C", "D"):
        if score >= config.GRADE_CUTOFFS[letter]:
            return Grade(letter)
    return Grade.F


class EffectivenessScorer:
    """Reduce correlation results to one score, grade and summary."""

    SIGN = {
        Direction.POSITIVE: 1,
        Direction.NEGATIVE: -1,
        Direction.NEUTRAL: 0,
    }

    def score(self, results: List[CorrelationResult]) -> EffectivenessScore:
        if not results:
            return EffectivenessScore(score=50, grade=Grade.C, summary=INSUFFICIENT_DATA_SUMMARY)

        weighted_sum = 0.0
        total_weight = 0
        for result in results:
            weight = max(result.significance.weight, 1)
            weighted_sum += self.SIGN[result.direction] * weight * (result.confidence / 100)
            total_weight += weight

        raw_score = (weighted_sum / total_weight + 1) * 50 if total_weight > 0 else 50
        score = round_half_up(max(0.0, min(100.0, raw_score)))
        grade = grade_for_score(score)

        positive_count = sum(1 for r in results if r.direction == Direction.POSITIVE)
        negative_count = sum(1 for r in results if r.direction == Direction.NEGATIVE)

        logger.debug(
            f"Effectiveness raw={raw_score:.2f} score={score} grade={grade.value} "
            f"(+{positive_count}/-{negative_count})"
        )
        return EffectivenessScore(
            score=score,
            grade=grade,
            summary=self._summary(grade, positive_count, negative_count),
        )

    def _summary(self, grade: Grade, positive_count: int, negative_count: int) -> str:
        if grade in (Grade.A, Grade.B):
            return f"Your stack shows {positive_count} positive correlation(s)! Keep it up."
        if grade == Grade.C:
            summary = "Solid base with room to optimize."
            if negative_count > 0:
                summary += f" {negative_count} intervention signal(s) to review."
            return summary
        return (
            f"Your stack could be optimized: {negative_count} negative vs "
            f"{positive_count} positive correlation(s). Review timing and dosages."
        )


def score_effectiveness(results: List[CorrelationResult], scorer: Optional[EffectivenessScorer] = None) -> EffectivenessScore:
    """Convenience function to score a result set."""
    return (scorer or EffectivenessScorer()).score(results)
