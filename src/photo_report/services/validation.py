"""Input file validation by size, declared type and magic bytes."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from photo_report.config import ALLOWED_MEDIA_TYPES, MAX_FILE_SIZE
from photo_report.domain.errors import ErrorCode, PhotoAppError
from photo_report.domain.photos import InputBlob

HEADER_LENGTH = 12

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MagicSignature:
    """Expected bytes at fixed offsets of a file header."""

    media_type: str
    parts: tuple[tuple[int, bytes], ...]

    def matches(self, header: bytes) -> bool:
        return all(
            header[offset : offset + len(expected)] == expected
            for offset, expected in self.parts
        )


SIGNATURES: dict[str, MagicSignature] = {
    signature.media_type: signature
    for signature in (
        MagicSignature("image/jpeg", ((0, b"\xff\xd8\xff"),)),
        MagicSignature("image/png", ((0, b"\x89PNG\r\n\x1a\n"),)),
        MagicSignature("image/gif", ((0, b"GIF8"),)),
        MagicSignature("image/webp", ((0, b"RIFF"), (8, b"WEBP"))),
    )
}


@dataclass(frozen=True)
class Rejection:
    """Input blob that failed processing, with the reason."""

    blob: InputBlob
    error: PhotoAppError
    stage: str = "validating"

    @property
    def code(self) -> ErrorCode:
        return self.error.code


@dataclass
class ValidationReport:
    """Partition of a batch into accepted and rejected blobs."""

    accepted: list[InputBlob] = field(default_factory=list)
    rejected: list[Rejection] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)


@dataclass
class FileValidator:
    """Accepts image files whose header matches their declared type."""

    max_file_size: int = MAX_FILE_SIZE
    allowed_media_types: frozenset[str] = ALLOWED_MEDIA_TYPES

    def validate(self, blob: InputBlob) -> None:
        """Raise PhotoAppError if the blob is not an acceptable image."""
        if blob.size > self.max_file_size:
            raise PhotoAppError(
                f"{blob.name}: file exceeds {self.max_file_size} bytes",
                ErrorCode.FILE_TOO_LARGE,
                {"file_size": blob.size, "max_size": self.max_file_size},
            )
        if blob.size == 0:
            raise PhotoAppError(
                f"{blob.name}: file is empty",
                ErrorCode.INVALID_FILE_TYPE,
                {"file_type": blob.media_type},
            )
        if blob.media_type not in self.allowed_media_types:
            raise PhotoAppError(
                f"{blob.name}: unsupported media type {blob.media_type}",
                ErrorCode.INVALID_FILE_TYPE,
                {"file_type": blob.media_type},
            )
        signature = SIGNATURES.get(blob.media_type)
        if signature is None or not signature.matches(blob.head(HEADER_LENGTH)):
            raise PhotoAppError(
                f"{blob.name}: header does not match {blob.media_type}",
                ErrorCode.INVALID_FILE_TYPE,
                {"file_type": blob.media_type},
            )

    def check(self, blob: InputBlob) -> PhotoAppError | None:
        """Return the rejection reason for a blob, or None if it is accepted."""
        try:
            self.validate(blob)
        except PhotoAppError as exc:
            return exc
        return None

    def validate_many(self, blobs: Iterable[InputBlob]) -> ValidationReport:
        """Validate every blob without stopping on the first failure."""
        report = ValidationReport()
        for blob in blobs:
            error = self.check(blob)
            if error is None:
                report.accepted.append(blob)
            else:
                _logger.info("Rejected %s: %s", blob.name, error.code)
                report.rejected.append(Rejection(blob=blob, error=error))
        return report
