import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .database import SqlKeyValueStore
from .env import DEFAULT_STORE_PATHS, STORE_BACKENDS, Settings, load_env
from .errors import InvalidArgument
from .ids import JWTTokenManager, UUIDProvider
from .job import PortableDataType
from .job_manager import JobManager
from .logger import StructuredLogger, get_logger
from .schema import AUTH_DATA_FIELDS, OPTIONAL_STR_FIELDS, validate_job_data
from .storage import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

CLEARABLE_FIELDS = ["data_type", *OPTIONAL_STR_FIELDS, *AUTH_DATA_FIELDS]


def open_store(backend: str, path: Optional[Path]) -> KeyValueStore:
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "json":
        return JsonFileKeyValueStore(path or DEFAULT_STORE_PATHS["json"])
    if backend == "sqlite":
        return SqlKeyValueStore(path or DEFAULT_STORE_PATHS["sqlite"])
    raise InvalidArgument(f"Unknown store backend: {backend}")


def build_manager(settings: Settings, store: KeyValueStore) -> JobManager:
    return JobManager(
        store,
        UUIDProvider(),
        JWTTokenManager(settings.token_secret, ttl=settings.token_ttl),
    )


def parse_payload(text: str) -> Any:
    """Auth data arrives as JSON when it parses, otherwise as the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def cmd_create(args: argparse.Namespace, manager: JobManager, logger: StructuredLogger) -> int:
    token = manager.create_new_user_job(args.data_type, args.export_service, args.import_service)
    logger.record_job_created()
    logger.info(
        "Job created",
        data_type=args.data_type,
        export_service=args.export_service,
        import_service=args.import_service,
    )
    print(token)
    return 0


def require_valid_token(manager: JobManager, token: str) -> str:
    """Return the job id bound to a token issued by this deployment."""
    if not manager.token_manager.verify_token(token):
        raise InvalidArgument("Invalid or expired token")
    return manager.token_manager.get_job_id(token)


def cmd_find(args: argparse.Namespace, manager: JobManager, logger: StructuredLogger) -> int:
    job_id = require_valid_token(manager, args.token)
    job = manager.find_existing_job(args.token)
    logger.record_lookup(found=job is not None)
    if job is None:
        logger.warning("Job not found", token=args.token)
        print(f"Job not found: {args.token}", file=sys.stderr)
        return 1
    if job.id != job_id:
        raise InvalidArgument("Token does not belong to the stored job")
    logger.debug("Job found", id=job.id, data_type=job.data_type)
    print(json.dumps(job.to_dict(), indent=2, default=str))
    return 0


def cmd_update(args: argparse.Namespace, manager: JobManager, logger: StructuredLogger) -> int:
    require_valid_token(manager, args.token)
    job = manager.find_existing_job(args.token)
    if job is None:
        raise InvalidArgument(f"Attempting to update a non-existent job: {args.token}")

    changes = {}
    for attr in ["data_type", *OPTIONAL_STR_FIELDS]:
        value = getattr(args, attr)
        if value is not None:
            changes[attr] = value
    for attr in AUTH_DATA_FIELDS:
        value = getattr(args, attr)
        if value is not None:
            changes[attr] = parse_payload(value)
    for attr in args.clear or []:
        changes[attr] = None

    if "data_type" in changes and changes["data_type"] is not None:
        if PortableDataType.from_name(changes["data_type"]) is None:
            raise InvalidArgument(f"Unknown data type: {changes['data_type']}")

    manager.update_job(job.with_fields(**changes))
    logger.record_job_updated()
    logger.info("Job updated", id=job.id, fields=sorted(changes))
    return 0


def cmd_validate(args: argparse.Namespace, manager: JobManager, logger: StructuredLogger) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        content = f.read()
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        errors = [f"Not valid JSON: {e}"]
    else:
        if isinstance(data, dict):
            errors = validate_job_data(data)
        else:
            errors = [f"Expected a JSON object, got {type(data).__name__}"]
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        return 2
    print("Valid")
    return 0


def cmd_list(args: argparse.Namespace, manager: JobManager, logger: StructuredLogger) -> int:
    tokens = manager.store.keys()
    if not tokens:
        print("No jobs in store.")
        return 0
    for token in tokens:
        print(token)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="portability", description="Manage data portability jobs")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--store-backend", choices=STORE_BACKENDS, help="Override PORTABILITY_STORE_BACKEND")
    parser.add_argument("--store", help="Override PORTABILITY_STORE_PATH")

    subparsers = parser.add_subparsers(dest="command")
    data_types = [t.name for t in PortableDataType]

    crt = subparsers.add_parser("create", help="Create a new job and print its token")
    crt.add_argument("--data-type", choices=data_types, help="Data type to transfer")
    crt.add_argument("--export-service", help="Service to export from")
    crt.add_argument("--import-service", help="Service to import into")
    crt.set_defaults(func=cmd_create)

    fnd = subparsers.add_parser("find", help="Print a stored job as JSON")
    fnd.add_argument("token", help="Job token")
    fnd.set_defaults(func=cmd_find)

    upd = subparsers.add_parser("update", help="Replace a stored job with updated fields")
    upd.add_argument("token", help="Job token")
    upd.add_argument("--data-type", help="Data type to transfer")
    for attr in OPTIONAL_STR_FIELDS:
        upd.add_argument(f"--{attr.replace('_', '-')}", dest=attr)
    for attr in AUTH_DATA_FIELDS:
        upd.add_argument(f"--{attr.replace('_', '-')}", dest=attr, help="JSON payload or raw string")
    upd.add_argument("--clear", action="append", choices=CLEARABLE_FIELDS, help="Unset a field (repeatable)")
    upd.set_defaults(func=cmd_update)

    val = subparsers.add_parser("validate", help="Validate a stored job JSON mapping")
    val.add_argument("--input", required=True, help="Path to job JSON input")
    val.set_defaults(func=cmd_validate)

    lst = subparsers.add_parser("list", help="List all stored job tokens")
    lst.set_defaults(func=cmd_list)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    # Load .env if present (PORTABILITY_TOKEN_SECRET, PORTABILITY_STORE_PATH, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    settings = Settings.from_env()
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    backend = args.store_backend or settings.store_backend
    if args.store:
        store_path = Path(args.store)
    elif args.store_backend and args.store_backend != settings.store_backend:
        store_path = None
    else:
        store_path = settings.store_path

    store = open_store(backend, store_path)
    try:
        return args.func(args, build_manager(settings, store), logger)
    except InvalidArgument as e:
        logger.record_failure(type(e).__name__)
        logger.error(f"{args.command} failed: {e}", command=args.command)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (OSError, SQLAlchemyError) as e:
        logger.record_failure(type(e).__name__)
        logger.error(f"{args.command} failed: store error", command=args.command, error=str(e))
        raise
    finally:
        logger.log_metrics_summary()
        if isinstance(store, SqlKeyValueStore):
            store.close()


if __name__ == "__main__":
    sys.exit(main())
