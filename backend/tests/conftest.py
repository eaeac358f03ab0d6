"""Root conftest — shared test configuration."""

import os
import tempfile

# Ensure tests never touch a real database or the real uploads directory
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="wish-uploads-"))
os.environ.setdefault("LOG_FORMAT", "text")
