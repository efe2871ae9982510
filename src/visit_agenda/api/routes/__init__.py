"""Route group exports."""

from . import agenda, clients, health

__all__ = ["agenda", "clients", "health"]
