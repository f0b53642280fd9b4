# blogapi/repositories/base.py
import re
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List, Dict, Any, Generic, TypeVar

from blogapi.errors import InvalidIdentifierError

T = TypeVar("T")

ID_PATTERN = re.compile(r'^[0-9a-f]{32}$')


def generate_id() -> str:
    """New opaque key: 32 lowercase hex characters."""
    return uuid.uuid4().hex


def ensure_valid_id(entity_id: str, kind: str = 'post') -> str:
    """Reject identifiers that cannot be a store key."""
    if not isinstance(entity_id, str) or not ID_PATTERN.match(entity_id):
        raise InvalidIdentifierError(f'Invalid {kind} ID')
    return entity_id


def format_timestamp(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository class defining the standard CRUD interface."""

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> Optional[T]:
        """Retrieve a single entity by its ID."""
        pass

    @abstractmethod
    async def get_all(
        self, offset: int = 0, limit: Optional[int] = None, **filters: Any
    ) -> List[T]:
        """Retrieve multiple entities with pagination and optional filters."""
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> T:
        """Create a new entity and return it."""
        pass

    @abstractmethod
    async def update(
        self, entity_id: str, data: Dict[str, Any]
    ) -> Optional[T]:
        """Update an existing entity and return the updated version."""
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """Delete an entity. Returns True if successful."""
        pass

    @abstractmethod
    async def count(self, **filters: Any) -> int:
        """Count entities matching the given filters."""
        pass
