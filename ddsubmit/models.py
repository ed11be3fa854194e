"""Data structures for credentials and metric submissions."""
from enum import Enum
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credentials(BaseModel):
    """Datadog API and application keys."""
    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    app_key: str = Field(min_length=1)


class MetricType(str, Enum):
    """Submission semantics of a metric."""
    COUNTER = "counter"
    GAUGE = "gauge"


class DataPoint(BaseModel):
    """A single (timestamp, value) pair."""
    model_config = ConfigDict(frozen=True)

    timestamp: float
    value: float

    def as_pair(self) -> List[float]:
        return [self.timestamp, self.value]


class Metric(BaseModel):
    """A metric submission with one or more points."""
    model_config = ConfigDict(frozen=True)

    type: MetricType
    name: str
    points: Tuple[DataPoint, ...] = Field(min_length=1)
    tags: Tuple[str, ...] = ()

    @field_validator('tags')
    @classmethod
    def dedupe_tags(cls, v):
        """Drop repeated tags, keeping first-seen order."""
        return tuple(dict.fromkeys(v))

    def to_payload(self) -> Dict[str, Any]:
        """Stable JSON-ready representation, used for dry runs."""
        return {
            "metric": self.name,
            "points": [p.as_pair() for p in self.points],
            "type": self.type.value,
            "tags": list(self.tags),
        }
