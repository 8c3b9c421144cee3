# backend/tourify/api/__init__.py
