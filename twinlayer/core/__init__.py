"""Shared infrastructure (logging) for Twinlayer."""
