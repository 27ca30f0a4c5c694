"""
Document-style access to one ORM model.

Routers talk to persistence through get/put/update/delete/query so that
records behave like documents keyed by id. Timestamps (created_at,
updated_at) are assigned by the database, never by callers.
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from sqlalchemy.orm import Session
import logging

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

SERVER_MANAGED_FIELDS = ("created_at", "updated_at")


class DocumentStore(Generic[ModelT]):
    """
    Thin store over a SQLAlchemy session.

    Writes are flushed, not committed: the request-scoped session from
    get_db commits on success and rolls back on error. Storage errors
    (SQLAlchemyError) propagate to the caller unchanged.
    """

    def __init__(self, db: Session, model: Type[ModelT], key: str = "id"):
        self.db = db
        self.model = model
        self.key = key

    def _clean(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in values.items() if k not in SERVER_MANAGED_FIELDS and k != self.key}

    def get(self, identifier: Any) -> Optional[ModelT]:
        return self.db.get(self.model, identifier)

    def put(self, identifier: Any, values: Dict[str, Any]) -> ModelT:
        """Create the document, or replace the fields of an existing one."""
        obj = self.get(identifier) if identifier is not None else None
        if obj is None:
            obj = self.model(**self._clean(values))
            if identifier is not None:
                setattr(obj, self.key, identifier)
            self.db.add(obj)
        else:
            for field, value in self._clean(values).items():
                setattr(obj, field, value)
        self.db.flush()
        self.db.refresh(obj)
        return obj

    def update(self, identifier: Any, patch: Dict[str, Any]) -> Optional[ModelT]:
        """Apply a partial patch. Returns None when the document does not exist."""
        obj = self.get(identifier)
        if obj is None:
            return None
        for field, value in self._clean(patch).items():
            setattr(obj, field, value)
        self.db.flush()
        self.db.refresh(obj)
        return obj

    def delete(self, identifier: Any) -> bool:
        obj = self.get(identifier)
        if obj is None:
            return False
        self.db.delete(obj)
        self.db.flush()
        logger.debug(f"Deleted {self.model.__name__} {identifier}")
        return True

    def query(
        self,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> List[ModelT]:
        """Equality filters on columns, optional ordering and limit."""
        q = self.db.query(self.model)
        for field, value in filters.items():
            q = q.filter(getattr(self.model, field) == value)
        if order_by:
            column = getattr(self.model, order_by)
            q = q.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            q = q.limit(limit)
        return q.all()
