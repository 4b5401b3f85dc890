"""Devban board - realtime team Kanban board client."""

__version__ = "0.3.0"
