"""Kaizen: gamified task tracking service."""
