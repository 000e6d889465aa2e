"""
Translation between PortabilityJob and the key-value mapping kept in the store.

Strings are written only when non-empty, auth payloads whenever they are not
None. Reading trusts the writer and copies any value that is not None.

Invariant:
A stored mapping without a data type decodes to a bare id/token job, whatever
else is stored alongside it.
"""

from typing import Any, Dict, Mapping

from .errors import check_argument
from .job import PortabilityJob
from .schema import (
    AUTH_DATA_FIELDS,
    DATA_TYPE_DATA_KEY,
    EXPORT_ACCOUNT_DATA_KEY,
    EXPORT_AUTH_DATA_KEY,
    EXPORT_INITIAL_AUTH_DATA_KEY,
    EXPORT_SERVICE_DATA_KEY,
    ID_DATA_KEY,
    IMPORT_ACCOUNT_DATA_KEY,
    IMPORT_AUTH_DATA_KEY,
    IMPORT_INITIAL_AUTH_DATA_KEY,
    IMPORT_SERVICE_DATA_KEY,
    OPTIONAL_STR_FIELDS,
    TOKEN_DATA_KEY,
    is_present,
    is_set,
)


def to_job_data(job: PortabilityJob) -> Dict[str, Any]:
    """Converts a PortabilityJob to the key-value pairs to persist."""
    # Token is the store key so it is required
    check_argument(is_present(job.token), "Invalid token")
    check_argument(is_present(job.id), "Invalid id")

    data: Dict[str, Any] = {
        ID_DATA_KEY: job.id,
        TOKEN_DATA_KEY: job.token,
    }

    # Data type is not chosen until after the job is created
    if is_present(job.data_type):
        data[DATA_TYPE_DATA_KEY] = job.data_type

    if is_present(job.export_service):
        data[EXPORT_SERVICE_DATA_KEY] = job.export_service
    if is_present(job.export_account):
        data[EXPORT_ACCOUNT_DATA_KEY] = job.export_account
    if is_set(job.export_initial_auth_data):
        data[EXPORT_INITIAL_AUTH_DATA_KEY] = job.export_initial_auth_data
    if is_set(job.export_auth_data):
        data[EXPORT_AUTH_DATA_KEY] = job.export_auth_data

    if is_present(job.import_service):
        data[IMPORT_SERVICE_DATA_KEY] = job.import_service
    if is_present(job.import_account):
        data[IMPORT_ACCOUNT_DATA_KEY] = job.import_account
    if is_set(job.import_initial_auth_data):
        data[IMPORT_INITIAL_AUTH_DATA_KEY] = job.import_initial_auth_data
    if is_set(job.import_auth_data):
        data[IMPORT_AUTH_DATA_KEY] = job.import_auth_data

    return data


def from_job_data(data: Mapping[str, Any]) -> PortabilityJob:
    """Converts persisted key-value pairs to a PortabilityJob."""
    check_argument(is_present(data.get(TOKEN_DATA_KEY)), "token missing")
    check_argument(is_present(data.get(ID_DATA_KEY)), "id missing")

    job = PortabilityJob(id=data[ID_DATA_KEY], token=data[TOKEN_DATA_KEY])

    # Newly created jobs have no data type selected yet
    data_type = data.get(DATA_TYPE_DATA_KEY)
    if data_type is None:
        return job

    values: Dict[str, Any] = {"data_type": data_type}
    for attr, key in {**OPTIONAL_STR_FIELDS, **AUTH_DATA_FIELDS}.items():
        if data.get(key) is not None:
            values[attr] = data[key]
    return job.with_fields(**values)
