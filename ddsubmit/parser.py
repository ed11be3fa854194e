"""Conversion of command-line arguments into a metric submission."""
import math
import time
from typing import Sequence, Tuple

from ddsubmit.errors import ValidationError
from ddsubmit.models import DataPoint, Metric, MetricType

USAGE = "usage: ddsubmit TYPE METRIC VALUE(S)..."

TYPE_ALIASES = {
    "increment": MetricType.COUNTER,
    "incr": MetricType.COUNTER,
    "i": MetricType.COUNTER,
    "c": MetricType.COUNTER,
    "counter": MetricType.COUNTER,
    "gauge": MetricType.GAUGE,
    "g": MetricType.GAUGE,
}


def validate_type(metric_type: str) -> MetricType:
    """Map a type token (case-sensitive) to a metric type."""
    try:
        return TYPE_ALIASES[metric_type]
    except KeyError:
        raise ValidationError(
            f"'{metric_type}' is not a valid metric type. "
            f"must be one of 'counter', or 'gauge'."
        ) from None


def create_data_point(value: str) -> DataPoint:
    """Parse ``value`` and stamp it with the current epoch second.

    Only plain decimal or exponent notation is accepted: no surrounding
    whitespace, no digit separators, and the value must be finite.
    """
    if value != value.strip() or "_" in value:
        raise ValidationError(f"could not convert string to float: {value!r}")
    try:
        converted = float(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if not math.isfinite(converted):
        raise ValidationError(f"value must be a finite number: {value!r}")
    now = float(int(time.time()))
    return DataPoint(timestamp=now, value=converted)


def validate_and_convert_points(data: Sequence[str]) -> Tuple[DataPoint, ...]:
    if not data:
        raise ValidationError("no value(s)")
    return tuple(create_data_point(v) for v in data)


def split_tags(tags: str) -> Tuple[str, ...]:
    # "" splits to a single empty tag
    return tuple(tags.split(","))


def parse(args: Sequence[str], tags: str) -> Metric:
    """
    Build a metric from positional arguments.

    Args:
        args: TYPE, METRIC and at least one VALUE
        tags: Comma-separated tags, e.g. 'key:value,key2:value2'

    Returns:
        Validated metric with one point per value
    """
    if len(args) < 3:
        raise ValidationError(f"not enough arguments. {USAGE}")

    return Metric(
        type=validate_type(args[0]),
        name=args[1],
        points=validate_and_convert_points(args[2:]),
        tags=split_tags(tags),
    )
