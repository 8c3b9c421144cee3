# backend/tourify/utils/__init__.py
