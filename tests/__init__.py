"""
Test Suite for widgetry

Unit tests for caching, forms, widgets, configuration and logging, plus
integration tests for the FastAPI host.
"""
