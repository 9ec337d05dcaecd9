#!/usr/bin/env python3
"""
Start uvicorn for the SkyJourney API.
uvicorn calls create_app() once at startup, which builds and seeds the in-memory store.
"""
import os
import sys

from skyjourney.core.config import settings

os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "skyjourney.main:create_app", "--factory",
     "--host", settings.API_HOST, "--port", str(settings.API_PORT)],
)
