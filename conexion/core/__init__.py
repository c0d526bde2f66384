"""Core utilities and types for the conexion application."""

from .types import FirestoreDocument

__all__ = ["FirestoreDocument"]
