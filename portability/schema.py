from typing import Any, Dict, List, Mapping

from .job import PortableDataType

# Keys for values in the data store
ID_DATA_KEY = "UUID"
TOKEN_DATA_KEY = "TOKEN"
DATA_TYPE_DATA_KEY = "DATA_TYPE"
EXPORT_SERVICE_DATA_KEY = "EXPORT_SERVICE"
EXPORT_ACCOUNT_DATA_KEY = "EXPORT_ACCOUNT"
EXPORT_INITIAL_AUTH_DATA_KEY = "EXPORT_INITIAL_AUTH_DATA"
EXPORT_AUTH_DATA_KEY = "EXPORT_AUTH_DATA"
IMPORT_SERVICE_DATA_KEY = "IMPORT_SERVICE"
IMPORT_ACCOUNT_DATA_KEY = "IMPORT_ACCOUNT"
IMPORT_INITIAL_AUTH_DATA_KEY = "IMPORT_INITIAL_AUTH_DATA"
IMPORT_AUTH_DATA_KEY = "IMPORT_AUTH_DATA"

REQUIRED_STR_FIELDS = {
    "id": ID_DATA_KEY,
    "token": TOKEN_DATA_KEY,
}
# Job attribute -> store key, in write order
OPTIONAL_STR_FIELDS = {
    "export_service": EXPORT_SERVICE_DATA_KEY,
    "export_account": EXPORT_ACCOUNT_DATA_KEY,
    "import_service": IMPORT_SERVICE_DATA_KEY,
    "import_account": IMPORT_ACCOUNT_DATA_KEY,
}
AUTH_DATA_FIELDS = {
    "export_initial_auth_data": EXPORT_INITIAL_AUTH_DATA_KEY,
    "export_auth_data": EXPORT_AUTH_DATA_KEY,
    "import_initial_auth_data": IMPORT_INITIAL_AUTH_DATA_KEY,
    "import_auth_data": IMPORT_AUTH_DATA_KEY,
}

KNOWN_KEYS = (
    set(REQUIRED_STR_FIELDS.values())
    | {DATA_TYPE_DATA_KEY}
    | set(OPTIONAL_STR_FIELDS.values())
    | set(AUTH_DATA_FIELDS.values())
)


def is_present(value: Any) -> bool:
    """True for a string field that is neither None nor empty."""
    return value is not None and value != ""


def is_set(value: Any) -> bool:
    """True for an opaque field that is not None. Empty payloads count as set."""
    return value is not None


def validate_job_data(data: Mapping[str, Any]) -> List[str]:
    """
    Returns a list of problems with a stored job mapping. Empty list means valid.

    Reports everything ``from_job_data`` would reject, plus values it would
    silently drop or misread.
    """
    errors: List[str] = []

    for key in REQUIRED_STR_FIELDS.values():
        if key not in data:
            errors.append(f"Missing required field: {key}")
        elif not isinstance(data[key], str) or not is_present(data[key]):
            errors.append(f"Field '{key}' must be a non-empty string")

    for key in [DATA_TYPE_DATA_KEY, *OPTIONAL_STR_FIELDS.values()]:
        if data.get(key) is not None and not isinstance(data[key], str):
            errors.append(f"Field '{key}' must be a string if provided")

    data_type = data.get(DATA_TYPE_DATA_KEY)
    if isinstance(data_type, str) and PortableDataType.from_name(data_type) is None:
        errors.append(f"Unknown data type: {data_type}")

    if data_type is None:
        dropped = sorted(
            key
            for key in [*OPTIONAL_STR_FIELDS.values(), *AUTH_DATA_FIELDS.values()]
            if data.get(key) is not None
        )
        if dropped:
            errors.append(
                f"Fields stored without {DATA_TYPE_DATA_KEY} are ignored: {', '.join(dropped)}"
            )

    unknown = sorted(set(data.keys()) - KNOWN_KEYS)
    if unknown:
        errors.append(f"Unknown fields: {', '.join(unknown)}")

    return errors

