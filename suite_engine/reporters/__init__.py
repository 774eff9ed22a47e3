"""Reporters observing runner events."""

from suite_engine.reporters.base import Reporter
from suite_engine.reporters.loading import ReporterNotFoundError, load_reporter
from suite_engine.reporters.log import LogReporter

__all__ = ["LogReporter", "Reporter", "ReporterNotFoundError", "load_reporter"]
