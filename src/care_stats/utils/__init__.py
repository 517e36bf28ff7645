"""Shared helpers for care_stats."""
