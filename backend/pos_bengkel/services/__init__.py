# Overview: Usecase composition root; exposes one service per aggregate to the delivery layer.

from __future__ import annotations

from ..repositories import RepositoryManager
from ..resources import RESOURCES
from .product_service import ProductService
from .resource_service import ResourceService
from .role_service import RoleService
from .service_detail_service import ServiceDetailService
from .service_job_service import ServiceJobService
from .transaction_service import TransactionService
from .user_service import UserService

# Aggregates whose behaviour goes beyond the declared contract
SPECIALIZED = {
    "user": UserService,
    "role": RoleService,
    "product": ProductService,
    "service_job": ServiceJobService,
    "service_detail": ServiceDetailService,
    "transaction": TransactionService,
}


class UsecaseManager:
    """Single dependency handed to the routes: `usecases["customer"]`, `usecases.products`, ..."""

    def __init__(self, repos: RepositoryManager):
        self.repos = repos
        self._services: dict[str, ResourceService] = {
            name: SPECIALIZED.get(name, ResourceService)(spec, repos)
            for name, spec in RESOURCES.items()
        }

    def __getitem__(self, name: str) -> ResourceService:
        return self._services[name]

    @property
    def products(self) -> ProductService:
        return self._services["product"]  # type: ignore[return-value]

    @property
    def transactions(self) -> TransactionService:
        return self._services["transaction"]  # type: ignore[return-value]

    @property
    def roles(self) -> RoleService:
        return self._services["role"]  # type: ignore[return-value]

    @property
    def service_jobs(self) -> ServiceJobService:
        return self._services["service_job"]  # type: ignore[return-value]


__all__ = ["UsecaseManager", "ResourceService"]
