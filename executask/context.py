"""Process-wide collaborators for ExecuTask.

An `AppContext` owns the database engine, session factory and the external-service clients.
The HTTP app and the Celery worker each build one at startup and close it on shutdown.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from executask.database.database import DATABASE_URL, build_engine, build_session_factory, init_db
from executask.integrations.contacts import ContactResolver, build_contact_resolver
from executask.integrations.mailer import EmailSender, build_email_sender
from executask.integrations.object_store import ObjectStore, build_object_store
from executask.jobs.notifications import SEND_NOTIFICATION_TASK, handle_notification
from executask.jobs.queue import TaskQueue, build_task_queue

logger = logging.getLogger(__name__)


class AppContext:
    """Holds shared resources; passed explicitly to whatever needs them."""

    def __init__(
        self,
        engine: Engine,
        session_factory: sessionmaker,
        object_store: ObjectStore,
        email_sender: EmailSender,
        contact_resolver: ContactResolver,
        task_queue: Optional[TaskQueue] = None,
    ):
        self.engine = engine
        self.session_factory = session_factory
        self.object_store = object_store
        self.email_sender = email_sender
        self.contact_resolver = contact_resolver
        self.task_queue = task_queue

    @classmethod
    def from_env(cls, database_url: Optional[str] = None) -> "AppContext":
        """Build every collaborator from environment configuration and prepare the schema."""
        database_url = database_url or DATABASE_URL
        engine = build_engine(database_url)
        init_db(engine, database_url)
        session_factory = build_session_factory(engine)

        context = cls(
            engine=engine,
            session_factory=session_factory,
            object_store=build_object_store(),
            email_sender=build_email_sender(),
            contact_resolver=build_contact_resolver(session_factory),
        )
        # The local backend delivers in-process with a single attempt.
        context.task_queue = build_task_queue({
            SEND_NOTIFICATION_TASK: lambda payload: handle_notification(payload, context, max_attempts=1),
        })
        logger.info(f"Application context ready (database={engine.url.get_backend_name()})")
        return context

    def close(self) -> None:
        """Release broker and database connections."""
        if self.task_queue is not None:
            self.task_queue.close()
        self.engine.dispose()
