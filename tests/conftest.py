"""
Point the app at an in-memory database and a throwaway upload directory
before any test module imports `config`.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="loan-uploads-")
os.environ.setdefault("LOG_LEVEL", "WARNING")
