"""Helpers for testing code built on the external test bridge."""
