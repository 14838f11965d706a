"""Build Record Store — create/update/delete/retrieve/search protocol over build records.

Invariants:
    - Every public operation returns an OperationResult; no exception other than
      asyncio.CancelledError crosses this boundary
    - Validation failures are reported before any I/O
    - create is a single atomic insert of a complete record (identifier, shortcode,
      expires_at); there is no window where a record exists without a shortcode
    - Every successful create/update sets expires_at = now + retention (sliding expiry)
    - The shortcode of a record never changes after insert
    - Duplicate-key failures on insert are retried with a fresh identifier at most
      insert_retry_limit times, then surfaced as ConflictError
    - Stored payloads that fail to decompress or parse are DataCorruptionError,
      never conflated with not-found and never retried

Design Decisions:
    - Identifiers are pre-allocated snowflakes; the shortcode is derived before insert
    - Update is one conditional UPDATE on the live record: a record deleted or
      expired between lookup and write reports not-found
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import TypeVar

from buildshare.config import Settings
from buildshare.core.errors import (
    BuildShareError, ConflictError, DataCorruptionError, ErrorContext,
    InfrastructureError, InputValidationError, QueryTimeoutError,
    RecordNotFoundError,
)
from buildshare.core.operation_result import OperationResult
from buildshare.core.payload_codec import decode_and_decompress
from buildshare.core.repository_protocols import (
    BuildRecordLike, BuildRecordRepository,
)
from buildshare.core.search_criteria import check_precedence, parse_criteria
from buildshare.core.shortcode import (
    InvalidShortcodeError, identifier_for_shortcode, shortcode_for_identifier,
)
from buildshare.core.snowflake import SnowflakeGenerator, utc_now
from buildshare.core.url_builder import UrlBuilder
from buildshare.infrastructure.build_repository import SqlBuildRecordRepository
from buildshare.infrastructure.database import DatabaseSessionManager
from buildshare.schemas.build import (
    BuildRecordView, CreateInput, FileData, SchemaData, TransactionResult,
    UpdateInput, to_iso8601,
)
from buildshare.schemas.build_file import parse_build_file, serialize_build_file
from buildshare.services.identifier_allocator import IdentifierAllocator

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETENTION = timedelta(days=30)
DEFAULT_INSERT_RETRY_LIMIT = 3


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class BuildStore:
    """Owns the build record lifecycle; consumed by the HTTP layer."""

    def __init__(
        self,
        repository: BuildRecordRepository,
        allocator: IdentifierAllocator,
        url_builder: UrlBuilder,
        retention: timedelta = DEFAULT_RETENTION,
        insert_retry_limit: int = DEFAULT_INSERT_RETRY_LIMIT,
        search_timeout_seconds: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._repository = repository
        self._allocator = allocator
        self._urls = url_builder
        self.retention = retention
        self.insert_retry_limit = insert_retry_limit
        self.search_timeout_seconds = search_timeout_seconds
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        db: DatabaseSessionManager,
        clock: Callable[[], datetime] = utc_now,
    ) -> "BuildStore":
        repository = SqlBuildRecordRepository(db)
        generator = SnowflakeGenerator(
            settings.snowflake_worker_id, settings.snowflake_epoch, clock,
        )
        return cls(
            repository=repository,
            allocator=IdentifierAllocator(
                generator, repository, settings.allocation_max_attempts,
            ),
            url_builder=UrlBuilder(settings.base_url, settings.app_protocol),
            retention=timedelta(days=settings.retention_days),
            insert_retry_limit=settings.insert_retry_limit,
            search_timeout_seconds=settings.search_timeout_seconds,
            clock=clock,
        )

    # ─── Result boundary ─────────────────────────────────────────

    async def _guard(
        self, operation: str, shortcode: str | None, action: Awaitable[T],
        success_message: str,
    ) -> OperationResult[T]:
        try:
            data = await action
        except BuildShareError as e:
            e.context.operation = e.context.operation or operation
            e.context.shortcode = e.context.shortcode or shortcode
            log = logger.error if e.http_status >= 500 else logger.info
            log(
                f"{operation} failed: {e.message}",
                extra={
                    "operation": operation, "shortcode": shortcode,
                    "error_code": e.code,
                },
            )
            return OperationResult.fail(e)
        except Exception as e:
            logger.error(
                f"Unexpected error during {operation}: {e}",
                exc_info=True,
                extra={"operation": operation, "shortcode": shortcode},
            )
            return OperationResult.fail(InfrastructureError(
                "An unexpected error occurred", operation,
                ErrorContext(operation=operation, shortcode=shortcode),
            ))
        return OperationResult.ok(success_message, data)

    def schema_url(self, shortcode: str) -> str:
        return self._urls.schema_url(shortcode)

    def _transaction(self, shortcode: str, expires_at: datetime) -> TransactionResult:
        return TransactionResult(
            shortcode=shortcode,
            download_url=self._urls.download_url(shortcode),
            image_url=self._urls.image_url(shortcode),
            schema_url=self._urls.schema_url(shortcode),
            expires_at=to_iso8601(expires_at),
        )

    async def _find(self, shortcode: str) -> BuildRecordLike:
        record = await self._repository.find_by_shortcode(shortcode, self._clock())
        if record is None:
            raise RecordNotFoundError("No record found.")
        return record

    # ─── Writes ──────────────────────────────────────────────────

    async def create(self, data: CreateInput) -> OperationResult[TransactionResult]:
        return await self._guard(
            "create", None, self._create(data), "Build created successfully",
        )

    async def _create(self, data: CreateInput) -> TransactionResult:
        if _blank(data.primary) or _blank(data.secondary):
            raise InputValidationError(
                "Primary and Secondary powersets are required.", field="primary",
            )
        if _blank(data.archetype):
            raise InputValidationError("Archetype is required.", field="archetype")
        if _blank(data.build_data) or _blank(data.image_data):
            raise InputValidationError(
                "Build and image data are required.", field="buildData",
            )

        for attempt in range(1, self.insert_retry_limit + 1):
            identifier = await self._allocator.allocate()
            shortcode = shortcode_for_identifier(identifier)
            now = self._clock()
            expires_at = now + self.retention
            try:
                await self._repository.insert({
                    "id": identifier,
                    "shortcode": shortcode,
                    "name": data.name,
                    "description": data.description,
                    "archetype": data.archetype,
                    "primary": data.primary,
                    "secondary": data.secondary,
                    "build_data": data.build_data,
                    "image_data": data.image_data,
                    "created_at": now,
                    "updated_at": now,
                    "expires_at": expires_at,
                })
            except ConflictError:
                logger.warning(
                    f"Duplicate key on insert of {shortcode}, retrying",
                    extra={
                        "operation": "create", "shortcode": shortcode,
                        "identifier": identifier, "attempt": attempt,
                    },
                )
                continue
            logger.info(
                f"Build {shortcode} created",
                extra={
                    "operation": "create", "shortcode": shortcode,
                    "identifier": identifier,
                },
            )
            return self._transaction(shortcode, expires_at)

        raise ConflictError(
            "Could not create the build record: identifier collided "
            f"{self.insert_retry_limit} times.",
            ErrorContext(operation="create", attempt=self.insert_retry_limit),
        )

    async def update_by_shortcode(
        self, shortcode: str, data: UpdateInput,
    ) -> OperationResult[TransactionResult]:
        return await self._guard(
            "update", shortcode, self._update(shortcode, data),
            "Build updated successfully",
        )

    async def _update(self, shortcode: str, data: UpdateInput) -> TransactionResult:
        if _blank(data.build_data) or _blank(data.image_data):
            raise InputValidationError(
                "Build and image data are required.", field="buildData",
            )
        changes = data.optional_changes()
        for field in ("primary", "secondary"):
            if field in changes and _blank(changes[field]):
                raise InputValidationError(
                    f"{field.capitalize()} powerset cannot be blank.", field=field,
                )

        now = self._clock()
        expires_at = now + self.retention
        updated = await self._repository.update_by_shortcode(
            shortcode,
            {
                **changes,
                "build_data": data.build_data,
                "image_data": data.image_data,
                "updated_at": now,
                "expires_at": expires_at,
            },
            now,
        )
        if updated == 0:
            raise RecordNotFoundError("Build record not found.")
        logger.info(
            f"Build {shortcode} updated",
            extra={"operation": "update", "shortcode": shortcode},
        )
        return self._transaction(shortcode, expires_at)

    async def delete_by_shortcode(self, shortcode: str) -> OperationResult[None]:
        return await self._guard(
            "delete", shortcode, self._delete(shortcode),
            "Build successfully deleted.",
        )

    async def _delete(self, shortcode: str) -> None:
        deleted = await self._repository.delete_by_shortcode(shortcode, self._clock())
        if deleted == 0:
            raise RecordNotFoundError(
                "No record found with the given shortcode to delete.",
            )
        logger.info(
            f"Build {shortcode} deleted",
            extra={"operation": "delete", "shortcode": shortcode},
        )

    # ─── Reads ───────────────────────────────────────────────────

    async def retrieve_by_shortcode(
        self, shortcode: str,
    ) -> OperationResult[BuildRecordView]:
        return await self._guard(
            "retrieve", shortcode, self._retrieve(shortcode),
            "Build retrieved successfully",
        )

    async def _retrieve(self, shortcode: str) -> BuildRecordView:
        return BuildRecordView.model_validate(await self._find(shortcode))

    async def exists_by_shortcode(self, shortcode: str) -> OperationResult[None]:
        return await self._guard(
            "exists", shortcode, self._exists(shortcode),
            "Build located successfully",
        )

    async def _exists(self, shortcode: str) -> None:
        await self._find(shortcode)

    async def generate_file(self, shortcode: str) -> OperationResult[FileData]:
        return await self._guard(
            "generate_file", shortcode, self._generate_file(shortcode),
            "Successfully reconstructed the build file from the record.",
        )

    async def _generate_file(self, shortcode: str) -> FileData:
        record = await self._find(shortcode)
        context = ErrorContext(shortcode=shortcode, operation="generate_file")
        if _blank(record.build_data):
            raise DataCorruptionError("Record has no build data.", context)
        raw = decode_and_decompress(record.build_data, context)
        build = parse_build_file(raw, context)
        return FileData(
            shortcode=shortcode,
            character_name=record.name,
            archetype=record.archetype,
            primary=record.primary,
            secondary=record.secondary,
            data_bytes=serialize_build_file(build),
        )

    async def fetch_image(self, shortcode: str) -> OperationResult[bytes]:
        return await self._guard(
            "fetch_image", shortcode, self._fetch_image(shortcode),
            "Image retrieved successfully",
        )

    async def _fetch_image(self, shortcode: str) -> bytes:
        record = await self._find(shortcode)
        if _blank(record.image_data):
            raise RecordNotFoundError("No image stored for this build.")
        return decode_and_decompress(
            record.image_data,
            ErrorContext(shortcode=shortcode, operation="fetch_image"),
        )

    async def render_preview(self, shortcode: str) -> OperationResult[str]:
        return await self._guard(
            "render_preview", shortcode, self._render_preview(shortcode),
            "Preview rendered successfully",
        )

    async def _render_preview(self, shortcode: str) -> str:
        record = await self._find(shortcode)
        if _blank(record.page_data):
            raise RecordNotFoundError("No preview page stored for this build.")
        context = ErrorContext(shortcode=shortcode, operation="render_preview")
        raw = decode_and_decompress(record.page_data, context)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DataCorruptionError(
                f"Preview page is not valid UTF-8: {e.reason}", context,
            ) from e

    async def fetch_schema_data(self, shortcode: str) -> OperationResult[SchemaData]:
        return await self._guard(
            "fetch_schema_data", shortcode, self._fetch_schema_data(shortcode),
            "Build data retrieved successfully",
        )

    async def _fetch_schema_data(self, shortcode: str) -> SchemaData:
        record = await self._find(shortcode)
        return SchemaData(data=record.build_data)

    async def resolve_identifier(self, shortcode: str) -> OperationResult[int]:
        return await self._guard(
            "resolve", shortcode, self._resolve_identifier(shortcode),
            "Build identifier resolved",
        )

    async def _resolve_identifier(self, shortcode: str) -> int:
        try:
            identifier = identifier_for_shortcode(shortcode)
        except InvalidShortcodeError as e:
            raise InputValidationError(str(e), field="shortcode") from e
        except ValueError:
            # Well-formed but beyond any identifier ever issued
            raise RecordNotFoundError("No record found.") from None
        record = await self._repository.find_by_identifier(identifier, self._clock())
        # Non-canonical spellings (leading zeros) decode to the same identifier
        if record is None or record.shortcode != shortcode:
            raise RecordNotFoundError("No record found.")
        return identifier

    # ─── Search ──────────────────────────────────────────────────

    async def search(self, criteria: str) -> OperationResult[list[BuildRecordView]]:
        return await self._guard(
            "search", None, self._search(criteria),
            "Build records retrieved successfully",
        )

    async def _search(self, criteria: str) -> list[BuildRecordView]:
        values = parse_criteria(criteria)
        try:
            records = await asyncio.wait_for(
                self._repository.find_matching(values, self._clock()),
                timeout=self.search_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise QueryTimeoutError(
                f"Search timed out after {self.search_timeout_seconds}s", "search",
            ) from e
        check_precedence(values, records)
        if not records:
            raise RecordNotFoundError("No build records found matching the criteria.")
        return [BuildRecordView.model_validate(record) for record in records]
