"""Polars-backed metrics logging and optimizer trackers."""
