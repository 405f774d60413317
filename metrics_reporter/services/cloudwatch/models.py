"""Data point types shipped to CloudWatch.

A data point is one timestamped, dimensioned value. All points of a collection
cycle share the same timestamp and the same dimensions tuple.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Tuple


class StandardUnit(str, Enum):
    """Subset of the CloudWatch StandardUnit values the reporter emits."""
    COUNT = "Count"
    NONE = "None"


@dataclass(frozen=True)
class Dimension:
    name: str
    value: str

    def to_cloudwatch(self) -> Dict[str, str]:
        return {"Name": self.name, "Value": self.value}


Dimensions = Tuple[Dimension, ...]


def build_dimensions(static: Mapping[str, str]) -> Dimensions:
    """Turn the static dimension mapping into a tuple sorted by key."""
    return tuple(Dimension(name=key, value=static[key]) for key in sorted(static))


@dataclass(frozen=True)
class DataPoint:
    name: str
    value: float
    timestamp: datetime
    dimensions: Dimensions = ()
    unit: StandardUnit = StandardUnit.NONE

    def to_cloudwatch(self) -> Dict[str, Any]:
        """Render as a ``MetricData`` entry for ``PutMetricData``."""
        return {
            "MetricName": self.name,
            "Value": self.value,
            "Unit": self.unit.value,
            "Timestamp": self.timestamp,
            "Dimensions": [d.to_cloudwatch() for d in self.dimensions],
        }
