"""
Observation and intervention log import from CSV/JSON exports.

This is the layer that enforces the engine's caller preconditions: one
record per date and finite numeric metric values. The engine itself never
validates its input.
"""

import json
import logging
import math
import numbers
import os
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Set

import pandas as pd

from ..analysis.metrics import Observation

logger = logging.getLogger(__name__)

DATE_COLUMN = 'date'
PROVENANCE_COLUMNS = ('provenance', 'source')
INTERVENTION_COLUMNS = ('intervention', 'intervention_id', 'supplement', 'supplement_id')
TRUTHY = {'1', 'true', 'yes', 'y', 'x'}


class InputValidationError(ValueError):
    """Observation or intervention input violating the engine preconditions."""
    pass


def _read_json(path: str):
    with open(path, encoding='utf-8') as fh:
        try:
            return json.load(fh)
        except json.JSONDecodeError as e:
            raise InputValidationError(f"Malformed JSON in {path}: {e}") from e


def _read_frame(path: str) -> pd.DataFrame:
    """Read a CSV or JSON file into a DataFrame with stripped column names."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found: {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext not in ('.json', '.csv', '.txt'):
        raise InputValidationError(f"Unsupported file type '{ext}' for {path}. Use .csv or .json")

    try:
        if ext == '.json':
            payload = _read_json(path)
            df = pd.json_normalize(payload) if isinstance(payload, list) else pd.DataFrame(payload)
        else:
            df = pd.read_csv(path, encoding='utf-8')
    except InputValidationError:
        raise
    except (ValueError, TypeError, pd.errors.ParserError) as e:
        # EmptyDataError, ParserError and scalar-only JSON objects land here
        raise InputValidationError(f"Could not parse {path}: {e}") from e

    df.columns = [str(c).strip() for c in df.columns]
    # json_normalize flattens {"metrics": {...}} into "metrics.<name>"
    df.columns = [c[len('metrics.'):] if c.startswith('metrics.') else c for c in df.columns]
    return df


def _parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        raise InputValidationError("Missing date value")
    try:
        return pd.Timestamp(str(value).strip()).date()
    except (ValueError, TypeError) as e:
        raise InputValidationError(f"Invalid date value '{value}'") from e


def _to_metric(value, column: str, day: date) -> Optional[float]:
    """Convert a cell to a float; blank cells and '--' mean not measured."""
    if value is None:
        return None
    if pd.api.types.is_bool(value):
        raise InputValidationError(f"Metric {column} on {day.isoformat()} is not numeric: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if value in ('', '--'):
            return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"Non-numeric value '{value}' for {column} on {day}") from e


def _is_flag_set(value) -> bool:
    """Wide-format intervention flag: 1, 1.0, true, yes, x."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, numbers.Real):
        return value != 0
    return str(value).strip().lower() in TRUTHY


def observations_from_frame(df: pd.DataFrame, provenance: Optional[str] = None) -> List[Observation]:
    """Build observations from a frame with a date column and one column per metric."""
    if DATE_COLUMN not in df.columns:
        raise InputValidationError(f"Observation data needs a '{DATE_COLUMN}' column")

    source_col = next((c for c in PROVENANCE_COLUMNS if c in df.columns), None)
    metric_cols = [c for c in df.columns if c != DATE_COLUMN and c not in PROVENANCE_COLUMNS]

    observations = []
    for _, row in df.iterrows():
        day = _parse_date(row[DATE_COLUMN])
        metrics = {col: _to_metric(row[col], col, day) for col in metric_cols}
        source = provenance or (str(row[source_col]) if source_col and pd.notna(row[source_col]) else "unknown")
        observations.append(Observation(date=day, metrics=metrics, provenance=source))

    validate_observations(observations)
    return sorted(observations, key=lambda o: o.date)


def validate_observations(observations: Iterable[Observation]) -> None:
    """
    Check the engine preconditions on observation input.

    Raises:
        InputValidationError: on duplicate dates or non-finite metric values
    """
    seen = set()
    for obs in observations:
        if obs.date in seen:
            raise InputValidationError(f"Duplicate observation for {obs.date.isoformat()}")
        seen.add(obs.date)

        for name, value in obs.metrics.items():
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InputValidationError(
                    f"Metric {name} on {obs.date.isoformat()} is not numeric: {value!r}"
                )
            if math.isnan(value) or math.isinf(value):
                raise InputValidationError(
                    f"Metric {name} on {obs.date.isoformat()} is not finite: {value}"
                )


def interventions_from_frame(df: pd.DataFrame) -> Dict[date, Set[str]]:
    """
    Build the date -> intervention ids mapping.

    Accepts long format (one row per date and intervention) or wide format
    (one 0/1 flag column per intervention).
    """
    if DATE_COLUMN not in df.columns:
        raise InputValidationError(f"Intervention data needs a '{DATE_COLUMN}' column")

    by_date: Dict[date, Set[str]] = {}
    id_col = next((c for c in INTERVENTION_COLUMNS if c in df.columns), None)

    if id_col is not None:
        for _, row in df.iterrows():
            value = row[id_col]
            if pd.isna(value) or not str(value).strip():
                continue
            by_date.setdefault(_parse_date(row[DATE_COLUMN]), set()).add(str(value).strip())
    else:
        flag_cols = [c for c in df.columns if c != DATE_COLUMN]
        for _, row in df.iterrows():
            day = _parse_date(row[DATE_COLUMN])
            taken = {c for c in flag_cols if _is_flag_set(row[c])}
            if taken:
                by_date.setdefault(day, set()).update(taken)

    return by_date


def load_observations(path: str, provenance: Optional[str] = None) -> List[Observation]:
    """Load and validate observations from a CSV/JSON export."""
    df = _read_frame(path)
    observations = observations_from_frame(df, provenance=provenance)
    logger.info(f"Loaded {len(observations)} observations from {path}")
    return observations


def load_interventions(path: str) -> Dict[date, Set[str]]:
    """Load the intervention log from a CSV/JSON export."""
    df = _read_frame(path)
    by_date = interventions_from_frame(df)
    logger.info(f"Loaded interventions for {len(by_date)} days from {path}")
    return by_date


def load_intervention_names(path: str) -> Dict[str, str]:
    """Load an id -> display name mapping from a JSON object or a two-column CSV."""
    if path.lower().endswith('.json'):
        if not os.path.exists(path):
            raise FileNotFoundError(f"Input file not found: {path}")
        payload = _read_json(path)
        if not isinstance(payload, dict):
            raise InputValidationError(f"Expected a JSON object of id -> name in {path}")
        return {str(k): str(v) for k, v in payload.items()}

    df = _read_frame(path)
    if len(df.columns) < 2:
        raise InputValidationError(f"Expected id and name columns in {path}")
    id_col, name_col = df.columns[0], df.columns[1]
    return {str(row[id_col]): str(row[name_col]) for _, row in df.iterrows()}
