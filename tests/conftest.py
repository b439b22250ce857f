from datetime import date

import pytest
from PySide6.QtCore import QCoreApplication

from timetracker.db import connect, migrate
from timetracker.models import Task
from timetracker.repository import Repository
from timetracker.store import TaskStore


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def repo(tmp_path):
    conn = connect(tmp_path / "tracker.sqlite3")
    migrate(conn)
    yield Repository(conn)
    conn.close()


@pytest.fixture
def store(repo):
    return TaskStore(repo)


def make_task(task_id=1, **kw):
    fields = dict(
        id=task_id,
        title=f"Task {task_id}",
        category="sap-ewm",
        system="dev",
        task_type="implementation",
        created="2024-01-01T08:00:00.000",
        date=date(2024, 1, 1),
    )
    fields.update(kw)
    return Task(**fields)
