"""Verses - a small poetry publishing API."""
