"""Utility helpers for webProblem."""
