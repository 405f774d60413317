"""Periodic exporter of in-process metrics to Amazon CloudWatch."""

__version__ = "0.4.0"
