"""
Lifecycle operations for portability jobs.

Responsibilities:
- Generate the id and token of a new job.
- Persist encoded jobs under their token.
- Look up and replace existing jobs.

Non-Responsibilities:
- No logging; the calling layer observes and reports operations.
- No retries, locking or version checks. Concurrent updates of one token race
  and the last write wins.
- No validation of field transitions; any combination can be written.
"""

from typing import Optional, Union

from .codec import from_job_data, to_job_data
from .errors import InvalidArgument, check_argument
from .ids import IdProvider, TokenManager
from .job import PortabilityJob, PortableDataType
from .schema import is_present
from .storage import KeyValueStore


class JobManager:
    """Creates, finds and replaces portability jobs in a key-value store."""

    def __init__(self, store: KeyValueStore, id_provider: IdProvider, token_manager: TokenManager):
        self.store = store
        self.id_provider = id_provider
        self.token_manager = token_manager

    def create_new_user_job(
        self,
        data_type: Union[PortableDataType, str, None] = None,
        export_service: Optional[str] = None,
        import_service: Optional[str] = None,
    ) -> str:
        """
        Create a new job and return the token that identifies it.

        Called with no arguments the job holds only its id and token. Called
        with a data type it also records the chosen data type and services.

        Raises:
            InvalidArgument: services were given without a data type, or the
                data type is unknown
        """
        if data_type is None:
            check_argument(
                export_service is None and import_service is None,
                "A data type is required when services are selected",
            )
            fields = {}
        else:
            fields = {
                "data_type": _data_type_name(data_type),
                "export_service": export_service,
                "import_service": import_service,
            }

        new_id = self.id_provider.create_id()
        token = self.token_manager.create_new_token(new_id)
        job = PortabilityJob(id=new_id, token=token, **fields)
        self.store.put(token, to_job_data(job))
        return token

    def find_existing_job(self, token: str) -> Optional[PortabilityJob]:
        """Return the job stored under ``token``, or None if there is none."""
        check_argument(is_present(token), "token is required")
        data = self.store.get(token)
        if not data:
            return None
        return from_job_data(data)

    def update_job(self, job: PortabilityJob) -> None:
        """Replace the stored job at ``job.token`` with ``job``."""
        existing = self.store.get(job.token) if is_present(job.token) else None
        check_argument(existing is not None, "Attempting to update a non-existent job")
        data = to_job_data(job)
        self.store.put(job.token, data)


def _data_type_name(data_type: Union[PortableDataType, str]) -> str:
    if isinstance(data_type, PortableDataType):
        return data_type.name
    if PortableDataType.from_name(data_type) is None:
        raise InvalidArgument(f"Unknown data type: {data_type}")
    return data_type
