"""
app/services/reference_resolver.py

Find-or-create resolution for the reference entities an incident row points at.

Two resolvers share one algorithm:

    1. Look the entity up by its matching key.
    2. If absent, insert it inside a SAVEPOINT.
    3. If the insert hits a uniqueness violation (a concurrent import created
       the same entity first), roll back the SAVEPOINT and look it up again,
       exactly once.

A failure after the retry raises ReferenceResolutionError, which callers
treat as a problem with the current row only.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.incident_import import CategoryInput, PlaceInput
from app.repositories.reference_repository import CategoryRepository, PlaceRepository

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")


class ReferenceResolutionError(RuntimeError):
    """
    Raised when a reference entity can be neither found nor created.
    """

    def __init__(self, *, entity: str, key: str, message: str) -> None:
        super().__init__(message)
        self.entity = entity
        self.key = key
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"entity": self.entity, "key": self.key, "message": self.message}


class ReferenceResolver(ABC, Generic[InputT]):
    """
    Base find-or-create resolver.

    With ``create_missing=False`` the resolver only looks entities up and
    returns None for unknown ones; nothing is written.
    """

    entity_name: str = "Reference"

    def __init__(self, session: Session, *, create_missing: bool = True) -> None:
        self._session = session
        self._create_missing = create_missing
        self._resolved: dict[Hashable, uuid.UUID] = {}

    @abstractmethod
    def _match_key(self, item: InputT) -> Hashable:
        ...

    @abstractmethod
    def _find(self, item: InputT) -> uuid.UUID | None:
        ...

    @abstractmethod
    def _add(self, item: InputT) -> Any:
        """Stage a new ORM record for ``item`` and return it."""

    @abstractmethod
    def describe(self, item: InputT) -> str:
        ...

    def lookup(self, item: InputT) -> uuid.UUID | None:
        """
        Return the existing entity id without ever creating one.
        """

        key = self._match_key(item)
        if key in self._resolved:
            return self._resolved[key]

        found = self._safe_find(item)
        if found is not None:
            self._resolved[key] = found
        return found

    def resolve(self, item: InputT) -> uuid.UUID | None:
        """
        Return a stable id for ``item``, creating the entity on first sight.
        """

        found = self.lookup(item)
        if found is not None or not self._create_missing:
            return found

        created = self._create_with_retry(item)
        self._resolved[self._match_key(item)] = created
        return created

    def _create_with_retry(self, item: InputT) -> uuid.UUID:
        description = self.describe(item)
        try:
            with self._session.begin_nested():
                record = self._add(item)
            logger.info("Created %s %s id=%s", self.entity_name, description, record.id)
            return record.id
        except IntegrityError:
            logger.warning(
                "Concurrent creation of %s %s detected. Retrying lookup once.",
                self.entity_name,
                description,
            )
        except SQLAlchemyError as exc:
            raise ReferenceResolutionError(
                entity=self.entity_name,
                key=description,
                message=f"Failed to create {self.entity_name} {description}.",
            ) from exc

        existing = self._safe_find(item)
        if existing is None:
            logger.error(
                "%s %s still missing after duplicate key retry.",
                self.entity_name,
                description,
            )
            raise ReferenceResolutionError(
                entity=self.entity_name,
                key=description,
                message=f"Failed to find or create {self.entity_name} {description}.",
            )
        return existing

    def _safe_find(self, item: InputT) -> uuid.UUID | None:
        try:
            return self._find(item)
        except SQLAlchemyError as exc:
            description = self.describe(item)
            raise ReferenceResolutionError(
                entity=self.entity_name,
                key=description,
                message=f"Failed to look up {self.entity_name} {description}.",
            ) from exc


class PlaceResolver(ReferenceResolver[PlaceInput]):
    """
    Places match on administrative levels only; building, street and
    block/lot are stored on creation but ignored for matching.
    """

    entity_name = "Place"

    def __init__(self, session: Session, *, create_missing: bool = True) -> None:
        super().__init__(session, create_missing=create_missing)
        self._repository = PlaceRepository(session)

    def _match_key(self, item: PlaceInput) -> Hashable:
        return item.match_key

    def _find(self, item: PlaceInput) -> uuid.UUID | None:
        return self._repository.find_id_by_locality(item)

    def _add(self, item: PlaceInput) -> Any:
        return self._repository.add(item)

    def describe(self, item: PlaceInput) -> str:
        return " / ".join(item.match_key)


class CategoryResolver(ReferenceResolver[CategoryInput]):
    entity_name = "Category"

    def __init__(self, session: Session, *, create_missing: bool = True) -> None:
        super().__init__(session, create_missing=create_missing)
        self._repository = CategoryRepository(session)

    def _match_key(self, item: CategoryInput) -> Hashable:
        return item.match_key

    def _find(self, item: CategoryInput) -> uuid.UUID | None:
        return self._repository.find_id_by_name(item)

    def _add(self, item: CategoryInput) -> Any:
        return self._repository.add(item)

    def describe(self, item: CategoryInput) -> str:
        return f"'{item.name}' ({item.group})"
