#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates tables and seeds the super admin on startup when AUTO_SEED_ADMIN
is set, then serves the API with auto-reload.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    print(f"Access at: http://localhost:{port}")
    print(f"API Docs: http://localhost:{port}/docs")

    uvicorn.run("tourify.main:app", host="0.0.0.0", port=port, reload=True, log_level="info")
