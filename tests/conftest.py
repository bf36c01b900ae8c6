"""Pytest fixtures and configuration for ExecuTask tests."""

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from executask.context import AppContext
from executask.database.database import Base
from executask.database.category_repository import CategoryRepository
from executask.database.comment_repository import CommentRepository
from executask.database.attachment_repository import AttachmentRepository
from executask.database.todo_repository import TodoRepository
from executask.models.category import CreateCategoryPayload
from executask.models.todo import CreateTodoPayload
from executask.models.user import User
from executask.services.category_service import CategoryService
from executask.services.comment_service import CommentService
from executask.services.todo_service import TodoService

from tests.fakes import (
    InMemoryObjectStore,
    RecordingEmailSender,
    RecordingTaskQueue,
    StaticContactResolver,
)


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def other_user_id():
    """A second principal, used to check ownership scoping."""
    return "other-user-456"


@pytest.fixture(scope="function")
def engine():
    # The SQLite pragma listener (foreign keys on) is registered by executask.database.database.
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory, test_user_id, other_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates both test users (required for foreign key constraints).
    """
    from executask.database.models import UserDB

    session = session_factory()

    now = datetime.utcnow()
    session.add(UserDB(id=test_user_id, email="test@example.com", name="Test User", created_at=now, updated_at=now))
    session.add(UserDB(id=other_user_id, email="other@example.com", name="Other User", created_at=now, updated_at=now))
    session.commit()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def todo_repository(db_session: Session):
    return TodoRepository(db_session)


@pytest.fixture
def category_repository(db_session: Session):
    return CategoryRepository(db_session)


@pytest.fixture
def comment_repository(db_session: Session):
    return CommentRepository(db_session)


@pytest.fixture
def attachment_repository(db_session: Session):
    return AttachmentRepository(db_session)


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def task_queue():
    return RecordingTaskQueue()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def contact_resolver(test_user_id, other_user_id):
    return StaticContactResolver({
        test_user_id: "test@example.com",
        other_user_id: "other@example.com",
    })


@pytest.fixture
def todo_service(db_session: Session, object_store):
    return TodoService(db_session, object_store)


@pytest.fixture
def category_service(db_session: Session):
    return CategoryService(db_session)


@pytest.fixture
def comment_service(db_session: Session):
    return CommentService(db_session)


@pytest.fixture
def test_context(engine, session_factory, db_session, object_store, email_sender, contact_resolver, task_queue):
    """AppContext wired to the test database and in-memory fakes."""
    return AppContext(
        engine=engine,
        session_factory=session_factory,
        object_store=object_store,
        email_sender=email_sender,
        contact_resolver=contact_resolver,
        task_queue=task_queue,
    )


@pytest.fixture
def make_todo(todo_repository, test_user_id):
    """Factory inserting todos straight through the repository."""
    def _make(user_id=None, **fields):
        fields.setdefault("title", "Test Todo")
        return todo_repository.create(user_id or test_user_id, CreateTodoPayload(**fields))
    return _make


@pytest.fixture
def make_category(category_repository, test_user_id):
    def _make(user_id=None, **fields):
        fields.setdefault("name", "Work")
        return category_repository.create(user_id or test_user_id, CreateCategoryPayload(**fields))
    return _make


def _user(user_id: str, email: str) -> User:
    now = datetime.utcnow()
    return User(id=user_id, email=email, name=None, created_at=now, updated_at=now)


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    return _user(test_user_id, "test@example.com")


@pytest.fixture
def current_user(test_user):
    """Mutable holder for the principal the test client authenticates as."""
    return {"user": test_user}


@pytest.fixture
def app(test_context):
    from executask.api.app import create_app
    return create_app(context=test_context)


@pytest.fixture
def test_client(app, db_session: Session, current_user):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from executask.database.database import get_db
    from executask.auth.dependencies import get_current_user

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    # Override authentication to return the current test user
    def override_get_current_user():
        return current_user["user"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
def as_other_user(current_user, other_user_id):
    """Switch the test client to the second principal."""
    def _switch():
        current_user["user"] = _user(other_user_id, "other@example.com")
    return _switch
