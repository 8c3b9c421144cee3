# backend/tourify/schemas/__init__.py
"""Request and response models, one module per API area."""
