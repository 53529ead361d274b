"""Simulated stock trading service."""
