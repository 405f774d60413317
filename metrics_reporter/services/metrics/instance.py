"""Module-level singleton accessor for the default metrics registry.

Application code records into ``get_registry()``; the reporter reads the same
instance unless another one is injected at startup.
"""

from .registry import MetricsRegistry

# Module-level singleton instance
_registry: MetricsRegistry = MetricsRegistry()


def get_registry() -> MetricsRegistry:
    """Get the process-wide metrics registry."""
    return _registry


def set_registry(registry: MetricsRegistry) -> None:
    """Replace the process-wide metrics registry.

    Args:
        registry: The registry instance to use from now on
    """
    global _registry
    _registry = registry
