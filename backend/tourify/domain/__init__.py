# backend/tourify/domain/__init__.py
"""Pure booking rules with no database or HTTP dependencies."""
