"""
Portability job model.

A PortabilityJob is the full state of one transfer between an export service
and an import service. Instances are frozen; use ``with_fields`` to derive the
next state before handing it to ``JobManager.update_job``.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional

# Auth payloads are never inspected; any value the store can hold is accepted.
AuthData = Any


class PortableDataType(Enum):
    """Categories of content that can be transferred."""

    CALENDAR = "calendar"
    CONTACTS = "contacts"
    MAIL = "mail"
    PHOTOS = "photos"
    TASKS = "tasks"

    @classmethod
    def from_name(cls, name: str) -> Optional["PortableDataType"]:
        """Return the member whose canonical name is ``name``, or None."""
        try:
            return cls[name]
        except KeyError:
            return None


@dataclass(frozen=True)
class PortabilityJob:
    """Immutable state of a single portability job."""

    id: Optional[str] = None
    token: Optional[str] = None
    data_type: Optional[str] = None
    export_service: Optional[str] = None
    export_account: Optional[str] = None
    export_initial_auth_data: Optional[AuthData] = None
    export_auth_data: Optional[AuthData] = None
    import_service: Optional[str] = None
    import_account: Optional[str] = None
    import_initial_auth_data: Optional[AuthData] = None
    import_auth_data: Optional[AuthData] = None

    def with_fields(self, **changes: Any) -> "PortabilityJob":
        """Return a copy with ``changes`` applied; ``id`` and ``token`` are fixed."""
        if "id" in changes or "token" in changes:
            raise TypeError("id and token cannot be changed on an existing job")
        return replace(self, **changes)

    @property
    def portable_data_type(self) -> Optional[PortableDataType]:
        if self.data_type is None:
            return None
        return PortableDataType.from_name(self.data_type)

    def to_dict(self) -> Dict[str, Any]:
        """Field name -> value for every field that is set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }
