# backend/tourify/integrations/__init__.py
"""Clients for third-party payment gateways."""
