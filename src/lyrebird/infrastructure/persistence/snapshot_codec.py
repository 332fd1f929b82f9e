"""Transfer-file codec for the replay state handed across a restart."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from lyrebird.domain.music.entities import SessionRecord
from lyrebird.domain.shared.exceptions import SnapshotFormatError
from lyrebird.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

TRANSFER_FILE_PREFIX = "lyrebird-restart-"
TRANSFER_FILE_SUFFIX = ".json"

_records_adapter: TypeAdapter[list[SessionRecord]] = TypeAdapter(list[SessionRecord])


class SnapshotCodec:
    """Encodes the session records as a JSON array.

    Output is deterministic: records keep their order, fields are emitted in
    declaration order, and metadata never enters the file.
    """

    def encode(self, records: list[SessionRecord]) -> bytes:
        return _records_adapter.dump_json(records)

    def decode(self, data: bytes) -> list[SessionRecord]:
        try:
            return _records_adapter.validate_json(data)
        except ValidationError as e:
            raise SnapshotFormatError(
                ErrorMessages.SNAPSHOT_INVALID.format(errors=e.error_count())
            ) from e

    def write_transfer_file(
        self, records: list[SessionRecord], directory: Path | None = None
    ) -> Path:
        """Write *records* to a fresh named temporary file that outlives this process."""
        payload = self.encode(records)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            prefix=TRANSFER_FILE_PREFIX,
            suffix=TRANSFER_FILE_SUFFIX,
            dir=directory,
            delete=False,
        ) as handle:
            handle.write(payload)
            path = Path(handle.name)

        logger.info(LogTemplates.TRANSFER_FILE_WRITTEN, path, len(records))
        return path

    def consume_transfer_file(self, path: Path) -> list[SessionRecord]:
        """Read and delete the transfer file. It is never read twice."""
        try:
            data = path.read_bytes()
        except OSError as e:
            raise SnapshotFormatError(
                ErrorMessages.SNAPSHOT_UNREADABLE.format(path=path, error=e)
            ) from e

        try:
            path.unlink()
        except OSError as e:
            logger.warning(LogTemplates.TRANSFER_FILE_DELETE_FAILED, path, e)

        records = self.decode(data)
        logger.info(LogTemplates.TRANSFER_FILE_CONSUMED, path, len(records))
        return records
