"""Recurring events engine for the youth ministry dashboard."""
