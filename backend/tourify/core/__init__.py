# backend/tourify/core/__init__.py
