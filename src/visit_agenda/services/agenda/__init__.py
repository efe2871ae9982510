"""Agenda planning service."""

from .planner import AgendaPlanner, move_items, planned_time_for, remove_items

__all__ = ["AgendaPlanner", "move_items", "remove_items", "planned_time_for"]
