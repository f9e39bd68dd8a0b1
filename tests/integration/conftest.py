import os
import shutil

import pytest
from testcontainers.postgres import PostgresContainer

from invoicing.db import models
from invoicing.db.database import build_engine


def _docker_available() -> bool:
    if os.getenv("SKIP_DOCKER_TESTS") == "1":
        return False
    return shutil.which("docker") is not None


# Session-wide Postgres test container; overrides the SQLite engine of the root conftest
@pytest.fixture(scope="session")
def engine():
    if not _docker_available():
        pytest.skip("Docker is not available; skipping Postgres integration tests")
    image = os.getenv("TEST_POSTGRES_IMAGE", "postgres:16-alpine")
    try:
        container = PostgresContainer(image)
        container.start()
    except Exception as exc:  # docker daemon unreachable
        pytest.skip(f"Could not start Postgres container: {exc}")
    try:
        url = container.get_connection_url()
        eng = build_engine(url)
        models.Base.metadata.create_all(bind=eng)
        yield eng
        models.Base.metadata.drop_all(bind=eng)
        eng.dispose()
    finally:
        container.stop()
