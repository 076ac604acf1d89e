from __future__ import annotations

from typing import Generic, TypeVar, Type, Optional, Any
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from path_scraper.core.errors import StoreError

T = TypeVar("T")


class BaseRepository(Generic[T]):
    def __init__(self, session: Session, model: Type[T]) -> None:
        self.session = session
        self.model = model

    def create(self, obj: T, *, commit: bool = True) -> T:
        self.session.add(obj)
        if commit:
            self.commit()
            self.session.refresh(obj)
        return obj

    def get_by_id(self, id_: Any) -> Optional[T]:
        return self.session.get(self.model, id_)

    def commit(self) -> None:
        """Commit the session, rolling back and raising StoreError on failure."""
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Database write failed: {exc}", original_error=exc) from exc
