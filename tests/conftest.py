"""
Pytest configuration.

Database helpers and seed data live in tests/__init__.py and
tests/fixtures/; tests marked ``db`` create a private SQLite schema
(or use TEST_DATABASE_URL when set).
"""


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: needs a database schema (deselect with '-m \"not db\"')"
    )
