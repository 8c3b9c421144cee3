# backend/tourify/routes/__init__.py
