# backend/tourify/core/constants.py
"""Application-wide constants."""

BRAND_NAME = "Tourify"
BRAND_TAGLINE = "Book Local Guides and Tours"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = f"Backend API for {BRAND_NAME} - A marketplace connecting tourists with local guides"
API_VERSION = "1.0.0"
API_V1_PREFIX = "/api/v1"
