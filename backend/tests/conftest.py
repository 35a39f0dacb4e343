import os
import sys
import tempfile

# Add backend to path so the copilot package imports without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Settings are cached on first import, so point the app at a scratch DB first
_db_dir = tempfile.mkdtemp(prefix="copilot-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def client():
    from copilot.main import app

    with TestClient(app) as test_client:
        yield test_client
