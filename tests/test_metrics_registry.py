"""
Unit tests for MetricsRegistry and the default registry accessor.

Tests registration, lookup and iteration without any reporting involved.
"""

import pytest

from metrics_reporter.services.metrics import (
    Counter,
    DuplicateMetricError,
    Gauge,
    Histogram,
    MetricsRegistry,
    Timer,
    get_registry,
    set_registry,
)


def test_register_and_get(registry):
    """Test that a registered metric can be looked up by name."""
    counter = Counter()
    registry.register("jobs.done", counter)

    assert registry.get("jobs.done") is counter
    assert "jobs.done" in registry
    assert len(registry) == 1


def test_register_duplicate_raises(registry):
    """Test that registering an existing name raises DuplicateMetricError."""
    registry.register("jobs.done", Counter())

    with pytest.raises(DuplicateMetricError) as exc_info:
        registry.register("jobs.done", Counter())

    assert exc_info.value.name == "jobs.done"
    assert isinstance(exc_info.value, ValueError)


def test_get_missing_returns_none(registry):
    assert registry.get("nope") is None


def test_get_or_register_reuses_existing(registry):
    """Test that get_or_register only calls the factory once."""
    calls = []

    def factory():
        calls.append(1)
        return Histogram()

    first = registry.get_or_register("latency", factory)
    second = registry.get_or_register("latency", factory)

    assert first is second
    assert len(calls) == 1


def test_typed_shortcuts_create_expected_kinds(registry):
    """Test that the typed accessors create and return the right kind."""
    assert isinstance(registry.counter("a"), Counter)
    assert isinstance(registry.gauge("b"), Gauge)
    assert isinstance(registry.timer("c"), Timer)
    assert registry.counter("a") is registry.get("a")


def test_typed_shortcut_kind_mismatch_raises(registry):
    """Test that asking for a counter under a gauge's name fails loudly."""
    registry.gauge("mem.used")

    with pytest.raises(TypeError):
        registry.counter("mem.used")


def test_unregister(registry):
    registry.counter("a")
    registry.counter("b")

    registry.unregister("a")
    registry.unregister("missing")  # no error

    assert "a" not in registry
    assert len(registry) == 1

    registry.unregister_all()
    assert len(registry) == 0


def test_each_visits_every_entry(registry):
    """Test that each() yields every (name, metric) pair."""
    registry.counter("a")
    registry.gauge("b")
    registry.register("custom", object())

    seen = {}
    registry.each(lambda name, metric: seen.__setitem__(name, metric))

    assert set(seen) == {"a", "b", "custom"}
    assert seen["a"] is registry.get("a")


def test_each_tolerates_mutation_during_visit(registry):
    """Test that visitors may unregister metrics while iterating."""
    for name in ("a", "b", "c"):
        registry.counter(name)

    visited = []

    def visit(name, metric):
        visited.append(name)
        registry.unregister(name)

    registry.each(visit)

    assert sorted(visited) == ["a", "b", "c"]
    assert len(registry) == 0


def test_default_registry_can_be_replaced():
    """Test that set_registry() swaps the process-wide registry."""
    original = get_registry()
    replacement = MetricsRegistry()
    try:
        set_registry(replacement)
        assert get_registry() is replacement
    finally:
        set_registry(original)
    assert get_registry() is original
