import os
import tempfile

# Settings are read once at import time, so the test database must be
# configured before anything from autoshop is imported.
_db_dir = tempfile.mkdtemp(prefix="autoshop-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEFAULT_TAX_RATE"] = "0.0"
os.environ["LOG_LEVEL"] = "WARNING"
