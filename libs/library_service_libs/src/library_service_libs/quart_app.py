"""
Typed Quart application class for library platform RPC services.

Infrastructure lives in declared attributes rather than ad hoc
``setattr``/``getattr`` on the app object.
"""

from __future__ import annotations

from typing import Any

from dishka import AsyncContainer
from quart import Quart
from sqlalchemy.ext.asyncio import AsyncEngine


class LibraryServiceApp(Quart):
    """Quart application with guaranteed platform infrastructure.

    GUARANTEED (set in the service's ``create_app`` factory):
        database_engine: SQLAlchemy async engine owned by the service
        container: Dishka async container for dependency injection

    OPTIONAL:
        service_name: Name used in error details and log records
    """

    database_engine: AsyncEngine
    container: AsyncContainer
    extensions: dict[str, Any]
    service_name: str

    def __init__(self, import_name: str, *args: Any, **kwargs: Any) -> None:
        super().__init__(import_name, *args, **kwargs)
        self.extensions = {}
        self.service_name = import_name
