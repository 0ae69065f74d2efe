"""Analysis module for intervention/biometric correlation screening."""

from .metrics import Observation, MetricDefinition, Polarity, DEFAULT_METRICS, METRIC_CATALOG
from .correlation_analyzer import (
    AnalyzerSettings,
    CorrelationAnalyzer,
    CorrelationResult,
    Direction,
    Significance,
    analyze,
)
from .insights import Insight, InsightGenerator, InsightType, generate_insights
from .effectiveness import EffectivenessScore, EffectivenessScorer, Grade, score_effectiveness
from .registry import DEFAULT_REGISTRY, EffectRegistry, KnownEffect, canonical_key
from .pipeline import AnalysisReport, StackAnalysisEngine, analyze_stack

__all__ = [
    "Observation",
    "MetricDefinition",
    "Polarity",
    "DEFAULT_METRICS",
    "METRIC_CATALOG",
    "AnalyzerSettings",
    "CorrelationAnalyzer",
    "CorrelationResult",
    "Direction",
    "Significance",
    "analyze",
    "Insight",
    "InsightGenerator",
    "InsightType",
    "generate_insights",
    "EffectivenessScore",
    "EffectivenessScorer",
    "Grade",
    "score_effectiveness",
    "DEFAULT_REGISTRY",
    "EffectRegistry",
    "KnownEffect",
    "canonical_key",
    "AnalysisReport",
    "StackAnalysisEngine",
    "analyze_stack",
]
