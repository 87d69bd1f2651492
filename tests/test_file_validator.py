"""Tests for input file validation."""

from photo_report.domain.errors import ErrorCode
from photo_report.domain.photos import InputBlob
from photo_report.services.validation import SIGNATURES, FileValidator
from tests.conftest import make_blob, make_image_bytes

JPEG_HEADER = b"\xff\xd8\xff\xe0" + b"\x00" * 12
PNG_HEADER = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8
GIF_HEADER = b"GIF89a" + b"\x00" * 10
WEBP_HEADER = b"RIFF\x24\x00\x00\x00WEBPVP8 "


def test_accepts_each_supported_type() -> None:
    validator = FileValidator()
    blobs = [
        InputBlob("a.jpg", "image/jpeg", JPEG_HEADER),
        InputBlob("b.png", "image/png", PNG_HEADER),
        InputBlob("c.gif", "image/gif", GIF_HEADER),
        InputBlob("d.webp", "image/webp", WEBP_HEADER),
    ]

    for blob in blobs:
        assert validator.check(blob) is None


def test_png_relabeled_as_jpeg_is_rejected() -> None:
    blob = InputBlob("fake.jpg", "image/jpeg", make_image_bytes("PNG"))

    error = FileValidator().check(blob)

    assert error is not None
    assert error.code == ErrorCode.INVALID_FILE_TYPE


def test_jpeg_declared_as_png_is_rejected() -> None:
    blob = make_blob("photo.png", fmt="JPEG", media_type="image/png")

    error = FileValidator().check(blob)

    assert error is not None
    assert error.code == ErrorCode.INVALID_FILE_TYPE


def test_rejects_oversized_file() -> None:
    validator = FileValidator(max_file_size=len(JPEG_HEADER) - 1)

    error = validator.check(InputBlob("big.jpg", "image/jpeg", JPEG_HEADER))

    assert error is not None
    assert error.code == ErrorCode.FILE_TOO_LARGE
    assert error.details["file_size"] == len(JPEG_HEADER)


def test_rejects_empty_file() -> None:
    error = FileValidator().check(InputBlob("empty.jpg", "image/jpeg", b""))

    assert error is not None
    assert error.code == ErrorCode.INVALID_FILE_TYPE


def test_rejects_unsupported_media_type() -> None:
    blob = InputBlob("a.bmp", "image/bmp", b"BM" + b"\x00" * 20)

    error = FileValidator().check(blob)

    assert error is not None
    assert error.code == ErrorCode.INVALID_FILE_TYPE


def test_webp_requires_both_riff_and_webp_markers() -> None:
    wave = b"RIFF\x24\x00\x00\x00WAVEfmt "

    assert not SIGNATURES["image/webp"].matches(wave)
    assert SIGNATURES["image/webp"].matches(WEBP_HEADER)


def test_validate_many_partitions_without_stopping() -> None:
    blobs = [
        InputBlob("bad.txt", "text/plain", b"hello"),
        InputBlob("a.jpg", "image/jpeg", JPEG_HEADER),
        InputBlob("empty.png", "image/png", b""),
        InputBlob("b.gif", "image/gif", GIF_HEADER),
    ]

    report = FileValidator().validate_many(blobs)

    assert [blob.name for blob in report.accepted] == ["a.jpg", "b.gif"]
    assert [rejection.blob.name for rejection in report.rejected] == [
        "bad.txt",
        "empty.png",
    ]
    assert all(r.code == ErrorCode.INVALID_FILE_TYPE for r in report.rejected)
    assert report.total == 4
