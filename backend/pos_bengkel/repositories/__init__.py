# Overview: Repository composition root; one repository per aggregate over the shared session.

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.orm import Session

from ..resources import RESOURCES
from .base import SQLAlchemyRepository, atomic
from .products import ProductRepository
from .service_jobs import ServiceJobRepository


class RepositoryManager:
    """
    Hands out exactly one repository per aggregate.

    Repositories are stateless; the session is resolved per call from the
    session factory, which for the app is Flask-SQLAlchemy's scoped session
    (one per app context, so one per request or worker thread).
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._repos: dict[str, SQLAlchemyRepository] = {}
        for name, spec in RESOURCES.items():
            if name == "product":
                repo = ProductRepository(session_factory)
            elif name == "service_job":
                repo = ServiceJobRepository(session_factory)
            else:
                repo = SQLAlchemyRepository(spec.model, session_factory, label=spec.label)
            self._repos[name] = repo

    def __getitem__(self, name: str) -> SQLAlchemyRepository:
        return self._repos[name]

    @property
    def session(self) -> Session:
        return self._session_factory()

    @property
    def products(self) -> ProductRepository:
        return self._repos["product"]  # type: ignore[return-value]

    @property
    def service_jobs(self) -> ServiceJobRepository:
        return self._repos["service_job"]  # type: ignore[return-value]

    @contextmanager
    def atomic(self) -> Iterator[Session]:
        with atomic(self.session) as session:
            yield session


__all__ = ["RepositoryManager", "SQLAlchemyRepository", "ProductRepository", "ServiceJobRepository", "atomic"]
