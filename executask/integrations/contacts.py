"""Resolution of a principal's contact address for notifications."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import requests
from dotenv import load_dotenv
from sqlalchemy.orm import sessionmaker

from executask.database.user_repository import UserRepository

load_dotenv()

logger = logging.getLogger(__name__)

CLERK_API_BASE = "https://api.clerk.com/v1"


class ContactLookupError(Exception):
    """The identity lookup failed for a transient reason (worth retrying)."""
    pass


class ContactResolver(ABC):
    """Maps a principal identifier to an email address."""

    @abstractmethod
    def resolve_email(self, user_id: str) -> Optional[str]:
        """Return the user's email, or None if the user has none.

        Raises ContactLookupError when the lookup itself failed.
        """
        pass


class DatabaseContactResolver(ContactResolver):
    """Reads the email captured from token claims into the users table."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def resolve_email(self, user_id: str) -> Optional[str]:
        db = self.session_factory()
        try:
            user = UserRepository(db).get(user_id)
            return user.email if user else None
        finally:
            db.close()


class ClerkContactResolver(ContactResolver):
    """Looks users up in the Clerk Backend API."""

    def __init__(self, secret_key: Optional[str] = None):
        self.secret_key = secret_key or os.getenv("CLERK_SECRET_KEY")
        if not self.secret_key:
            raise ValueError("Clerk secret key is required. Set CLERK_SECRET_KEY env var.")
        self.headers = {"Authorization": f"Bearer {self.secret_key}"}

    def resolve_email(self, user_id: str) -> Optional[str]:
        url = f"{CLERK_API_BASE}/users/{user_id}"
        try:
            response = requests.get(url, headers=self.headers, timeout=10)
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except requests.RequestException as e:
            raise ContactLookupError(f"Failed to fetch user {user_id} from Clerk: {e}") from e

        data = response.json()
        primary_id = data.get("primary_email_address_id")
        addresses = data.get("email_addresses") or []
        for address in addresses:
            if address.get("id") == primary_id:
                return address.get("email_address")
        return addresses[0].get("email_address") if addresses else None


def build_contact_resolver(session_factory: sessionmaker) -> ContactResolver:
    """Contact resolver selected by the CONTACT_RESOLVER env var."""
    backend = os.getenv("CONTACT_RESOLVER", "database")
    if backend == "clerk":
        return ClerkContactResolver()
    if backend == "database":
        return DatabaseContactResolver(session_factory)
    raise ValueError(f"Unknown CONTACT_RESOLVER: {backend}")
