"""
conftest.py
-----------
Shared pytest fixtures for Daybook tests.

Provides fixtures for:
- Database setup and teardown
- Managers bound to a live session
- Sample entry content
"""
import json

import pytest

from daybook.core.secrets import MemorySecretStore


# ----- Sample Content Fixtures -----

def make_document(text):
    """Factory for a minimal structured document holding one paragraph."""
    return json.dumps(
        {
            "type": "doc",
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": text}]}
            ],
        }
    )


@pytest.fixture
def document():
    """Factory fixture building a one-paragraph document."""
    return make_document


@pytest.fixture
def coffee_content():
    return make_document("Morning coffee on the balcony before work")


@pytest.fixture
def tea_content():
    return make_document("Green tea and a long walk by the river")


# ----- Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_path):
    """Path for a throwaway database file."""
    return tmp_path / "daybook.db"


@pytest.fixture
def test_db(test_db_path, tmp_path):
    """
    Create a migrated database for each test.

    Returns a DaybookDB instance with logging into tmp_path/logs and an
    in-memory secret store.
    """
    from daybook.database.manager import DaybookDB

    db = DaybookDB(
        db_path=test_db_path,
        log_dir=tmp_path / "logs",
        secret_store=MemorySecretStore(),
    )
    yield db
    db.close()


@pytest.fixture
def db_session(test_db):
    """Open a session; rolled back and closed at teardown."""
    session = test_db.get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def entry_manager(db_session, test_db):
    from daybook.database.managers import EntryManager

    return EntryManager(db_session, test_db.logger)


@pytest.fixture
def ai_operation_manager(db_session, test_db):
    from daybook.database.managers import AIOperationManager

    return AIOperationManager(db_session, test_db.logger)


@pytest.fixture
def settings_manager(db_session, test_db):
    from daybook.database.managers import SettingsManager

    return SettingsManager(db_session, test_db.logger)
