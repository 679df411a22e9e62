"""Presentation layer: pure-Python view-models and the optional Qt adapter."""
