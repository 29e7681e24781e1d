"""Root conftest: test env applies to ALL test paths (tests/, apps/api/tests/).

DATABASE_URL must be set before apps.api.db is imported: the engine is built at import time.
"""

import os
import tempfile

os.environ.setdefault("ENV", "test")
os.environ.setdefault("PYTEST_RUNNING", "1")
# No politeness delay in tests
os.environ.setdefault("CRAWL_DELAY", "0")

# One SQLite file per session; a file (not :memory:) so crawl threads share the data
_TEST_DB_DIR = tempfile.mkdtemp(prefix="lemma_search_test_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}")
