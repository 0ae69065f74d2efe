"""Configuration management for the Stack Efficacy tool."""

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Analysis window
    WINDOW_DAYS: int = int(os.getenv("WINDOW_DAYS", "30"))  # rolling window in days

    # Correlation screening guards
    MIN_HISTORY_DAYS: int = int(os.getenv("MIN_HISTORY_DAYS", "7"))  # distinct observed days
    MIN_GROUP_SAMPLES: int = int(os.getenv("MIN_GROUP_SAMPLES", "3"))  # per with/without group
    NEUTRAL_BAND_PCT: float = float(os.getenv("NEUTRAL_BAND_PCT", "5"))  # |diff%| below this = neutral

    # Significance tiers: (minimum |diff%|, minimum total samples)
    SIGNIFICANCE_THRESHOLDS = {
        "high": (float(os.getenv("SIG_HIGH_PCT", "15")), int(os.getenv("SIG_HIGH_SAMPLES", "14"))),
        "medium": (float(os.getenv("SIG_MEDIUM_PCT", "10")), int(os.getenv("SIG_MEDIUM_SAMPLES", "10"))),
        "low": (float(os.getenv("SIG_LOW_PCT", "5")), int(os.getenv("SIG_LOW_SAMPLES", "7"))),
    }

    # Confidence heuristic: samples / SATURATION * 50 + |diff%| / SATURATION * 50
    CONFIDENCE_SAMPLE_SATURATION: int = 30
    CONFIDENCE_EFFECT_SATURATION: float = 20.0

    # Insights
    MAX_POSITIVE_INSIGHTS: int = int(os.getenv("MAX_POSITIVE_INSIGHTS", "3"))

    # Effectiveness grade cutoffs (score >= cutoff)
    GRADE_CUTOFFS = {
        "A": 80,
        "B": 65,
        "C": 50,
        "D": 35,
    }

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DEFAULT_OUTPUT_FORMAT: str = os.getenv("DEFAULT_OUTPUT_FORMAT", "table")

    @classmethod
    def get_significance_threshold(cls, tier: str) -> Optional[tuple]:
        """Get (min_percent, min_samples) for a significance tier."""
        return cls.SIGNIFICANCE_THRESHOLDS.get(tier)

    @classmethod
    def get_log_level(cls, verbose: bool = False) -> str:
        """Resolve the effective log level name."""
        if verbose:
            return "DEBUG"
        return cls.LOG_LEVEL.upper()

    @classmethod
    def validate(cls) -> bool:
        """Validate numeric configuration."""
        if cls.WINDOW_DAYS < 1:
            raise ValueError("WINDOW_DAYS must be at least 1")
        if cls.MIN_GROUP_SAMPLES < 1:
            raise ValueError("MIN_GROUP_SAMPLES must be at least 1")
        if cls.DEFAULT_OUTPUT_FORMAT not in ("table", "json"):
            raise ValueError(
                f"Unsupported DEFAULT_OUTPUT_FORMAT '{cls.DEFAULT_OUTPUT_FORMAT}'. Use 'table' or 'json'"
            )
        return True


config = Config()
