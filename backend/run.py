#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Points the app at the test database URL so local runs never touch
production data.
"""
import os
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("IS_TESTING", "true")

import uvicorn

if __name__ == "__main__":
    print("Starting TutorHub development server at http://localhost:8000 (docs at /docs)")
    uvicorn.run("tutorhub.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
