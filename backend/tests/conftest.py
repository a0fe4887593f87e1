import os
import tempfile

import pytest

# Point the service at a throwaway SQLite file before gridpulse.config loads
_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="gridpulse-test-"), "gridpulse.db")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DB_PATH}")


@pytest.fixture(scope="session", autouse=True)
def _database():
    from gridpulse.database import init_db
    init_db()
    yield
