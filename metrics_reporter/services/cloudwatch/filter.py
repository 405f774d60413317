"""Per-metric reporting policy.

A filter decides whether a metric is shipped at all and which percentiles are
computed for distribution metrics (histograms and timers). Filters are pure:
the answer depends only on the metric name and the filter's own configuration.
"""

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

DEFAULT_PERCENTILES: Tuple[float, ...] = (0.5, 0.75, 0.95, 0.99, 0.999, 1.0)


@runtime_checkable
class FilterPolicy(Protocol):
    """Decides what gets reported for a metric name."""

    def should_report(self, name: str) -> bool:
        ...

    def percentiles(self, name: str) -> List[float]:
        ...


def _validate_percentiles(values: Sequence[float]) -> Tuple[float, ...]:
    checked = tuple(float(p) for p in values)
    for p in checked:
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"Percentile {p} is outside [0, 1]")
    return checked


class NoFilter:
    """Report every metric with the default percentile set."""

    def __init__(self, percentiles: Sequence[float] = DEFAULT_PERCENTILES):
        self._percentiles = _validate_percentiles(percentiles)

    def should_report(self, name: str) -> bool:
        return True

    def percentiles(self, name: str) -> List[float]:
        return list(self._percentiles)

    def __repr__(self) -> str:
        return f"NoFilter(percentiles={list(self._percentiles)})"


@dataclass(frozen=True)
class FilterRule:
    """One ``fnmatch`` pattern and what to do with names matching it.

    ``percentiles=None`` means "use the filter's default set".
    """
    pattern: str
    report: bool = True
    percentiles: Optional[Tuple[float, ...]] = None

    def matches(self, name: str) -> bool:
        return fnmatchcase(name, self.pattern)


class PatternFilter:
    """Ordered glob rules; the first rule matching a name wins.

    Names no rule matches fall back to ``default_report`` and
    ``default_percentiles``.
    """

    def __init__(
        self,
        rules: Sequence[FilterRule] = (),
        default_report: bool = True,
        default_percentiles: Sequence[float] = DEFAULT_PERCENTILES,
    ):
        self.rules: Tuple[FilterRule, ...] = tuple(
            FilterRule(
                pattern=rule.pattern,
                report=rule.report,
                percentiles=None if rule.percentiles is None else _validate_percentiles(rule.percentiles),
            )
            for rule in rules
        )
        self.default_report = default_report
        self.default_percentiles = _validate_percentiles(default_percentiles)

    def _match(self, name: str) -> Optional[FilterRule]:
        for rule in self.rules:
            if rule.matches(name):
                return rule
        return None

    def should_report(self, name: str) -> bool:
        rule = self._match(name)
        if rule is None:
            return self.default_report
        return rule.report

    def percentiles(self, name: str) -> List[float]:
        rule = self._match(name)
        if rule is None or rule.percentiles is None:
            return list(self.default_percentiles)
        return list(rule.percentiles)

    @classmethod
    def from_spec(cls, spec: str, **kwargs) -> "PatternFilter":
        """Build a filter from ``"pattern:report[:p1|p2];..."``.

        Example: ``"debug.*:false;latency.*:true:0.5|0.99"``.
        """
        rules: List[FilterRule] = []
        for chunk in spec.split(";"):
            chunk = chunk.strip()
            if not chunk:
                continue
            parts = chunk.split(":")
            if len(parts) not in (2, 3) or not parts[0]:
                raise ValueError(f"Invalid filter rule {chunk!r}, expected pattern:report[:percentiles]")
            report = parts[1].strip().lower()
            if report not in ("true", "false"):
                raise ValueError(f"Invalid report flag {parts[1]!r} in filter rule {chunk!r}")
            percentiles: Optional[Tuple[float, ...]] = None
            if len(parts) == 3 and parts[2].strip():
                percentiles = tuple(float(p) for p in parts[2].split("|") if p.strip())
            rules.append(FilterRule(pattern=parts[0].strip(), report=report == "true", percentiles=percentiles))
        return cls(rules, **kwargs)

    def __repr__(self) -> str:
        return f"PatternFilter(rules={list(self.rules)}, default_report={self.default_report})"
