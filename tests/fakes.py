"""In-memory stand-ins for the external services, used by the test suite."""

from typing import Callable, Dict, List, Optional

from executask.integrations.contacts import ContactLookupError, ContactResolver
from executask.integrations.mailer import EmailDeliveryError, EmailSender
from executask.integrations.object_store import ObjectStore, ObjectStoreError
from executask.jobs.queue import JobPriority, QueueError, TaskQueue


class InMemoryObjectStore(ObjectStore):
    """Object store backed by a dict."""

    def __init__(self, fail_puts: bool = False, fail_deletes: bool = False):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.deleted: List[str] = []
        self.fail_puts = fail_puts
        self.fail_deletes = fail_deletes

    def put(self, key: str, data: bytes, content_type: str) -> str:
        if self.fail_puts:
            raise ObjectStoreError("put failed")
        self.objects[key] = data
        self.content_types[key] = content_type
        return key

    def presigned_url(self, key: str, expires_in: int = 3600) -> str:
        if key not in self.objects:
            raise ObjectStoreError(f"no such object: {key}")
        return f"https://objects.test/{key}?expires={expires_in}"

    def delete(self, key: str) -> None:
        if self.fail_deletes:
            raise ObjectStoreError("delete failed")
        self.objects.pop(key, None)
        self.deleted.append(key)


class RecordingTaskQueue(TaskQueue):
    """Records every queued task; optionally rejects some of them."""

    def __init__(self, reject: Optional[Callable[[dict], bool]] = None):
        self.sent: List[dict] = []
        self.reject = reject
        self.closed = False

    def send_task(self, task_name, payload, priority=JobPriority.DEFAULT, delay_seconds=0) -> str:
        if self.reject and self.reject(payload):
            raise QueueError("broker unavailable")
        task_id = f"task-{len(self.sent) + 1}"
        self.sent.append({
            "id": task_id,
            "task_name": task_name,
            "payload": payload,
            "priority": JobPriority(priority).value,
            "delay_seconds": delay_seconds,
        })
        return task_id

    def close(self) -> None:
        self.closed = True


class RecordingEmailSender(EmailSender):
    """Collects sent messages; the first `failures` sends raise EmailDeliveryError."""

    def __init__(self, failures: int = 0):
        self.sent: List[dict] = []
        self.failures = failures
        self.attempts = 0

    def send(self, recipient: str, subject: str, body: str) -> None:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise EmailDeliveryError("provider unavailable")
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})


class StaticContactResolver(ContactResolver):
    """Resolves emails from a fixed mapping."""

    def __init__(self, emails: Optional[Dict[str, str]] = None, fail: bool = False):
        self.emails = dict(emails or {})
        self.fail = fail

    def resolve_email(self, user_id: str) -> Optional[str]:
        if self.fail:
            raise ContactLookupError("identity provider unavailable")
        return self.emails.get(user_id)
