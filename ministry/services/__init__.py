"""Recurrence engine services: generation, description and lifecycle."""
