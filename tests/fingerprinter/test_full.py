"""Tests for full-file fingerprints and media type detection."""

import zlib

import pytest
from fileprint.common import Crc32
from fileprint.fingerprinter import mime_detector
from fileprint.fingerprinter.full import (
    compute_full_fingerprint,
    detect_media_type,
    run_full_fingerprint,
)
from fileprint.fingerprinter.mime_detector import MediaTypeDetector
from fileprint.fingerprinter.models import FileFingerprint, MediaTypeSource

KB = 1024
MB = 1024 * KB

# Bytes no filetype matcher recognizes and that are not text
OPAQUE = b"\x00\x01\x02\x03" * 256


class SpyDetector(MediaTypeDetector):
    """Detector recording which tiers were consulted."""

    def __init__(self, extension_table=None, peek_error=None, detect_error=None):
        super().__init__(extension_table=extension_table)
        self.peek_calls = []
        self.detect_calls = []
        self.peek_error = peek_error
        self.detect_error = detect_error

    def peek(self, data, label):
        self.peek_calls.append((data, label))
        if self.peek_error:
            raise self.peek_error
        return super().peek(data, label)

    def detect_file(self, file_path):
        self.detect_calls.append(file_path)
        if self.detect_error:
            raise self.detect_error
        return super().detect_file(file_path)


class TestComputeFullFingerprint:
    """Tests for checksum, size and label."""

    def test_checksum_and_size(self, make_file, patterned_bytes):
        """Test that the checksum covers the whole file."""
        data = patterned_bytes(1 * MB + 123)
        path = make_file("data.bin", data)

        fingerprint = compute_full_fingerprint(path)

        assert fingerprint.checksum == zlib.crc32(data)
        assert fingerprint.size_bytes == len(data)
        assert fingerprint.label == "data.bin"
        assert not fingerprint.failed

    def test_small_buffer_gives_same_checksum(self, make_file, patterned_bytes):
        """Test that chunking does not skip or repeat bytes."""
        data = patterned_bytes(100 * KB + 7)
        path = make_file("data.bin", data)

        small = compute_full_fingerprint(path, buffer_size=7)
        default = compute_full_fingerprint(path)

        assert small.checksum == default.checksum == zlib.crc32(data)

    def test_identical_content_different_names(self, make_file):
        """Test that the checksum depends only on content."""
        content = b"Test content" * 2000
        first = make_file("a/photo.jpg", content)
        second = make_file("b/renamed.dat", content)

        assert compute_full_fingerprint(first).checksum == compute_full_fingerprint(second).checksum

    def test_checksum_independent_of_media_type_path(self, make_file):
        """Test that extension, peek and content detection give the same checksum."""
        path = make_file("note.txt", b"plain words\n" * 100)

        by_extension = run_full_fingerprint(path)
        by_peek = run_full_fingerprint(path, detector=MediaTypeDetector(extension_table={}))

        assert by_extension.media_type_source == MediaTypeSource.EXTENSION
        assert by_peek.media_type_source == MediaTypeSource.PEEK
        assert by_extension.fingerprint.checksum == by_peek.fingerprint.checksum

    def test_idempotent(self, make_file, patterned_bytes):
        """Test that repeated calls give equal fingerprints."""
        path = make_file("data.bin", patterned_bytes(70 * KB))

        assert compute_full_fingerprint(path) == compute_full_fingerprint(path)

    def test_label_override(self, make_file):
        """Test that an override label replaces the file name."""
        path = make_file("tmp-upload-123", b"\x89PNG\r\n\x1a\n" + b"\x00" * 100)

        fingerprint = compute_full_fingerprint(path, label="holiday.png")

        assert fingerprint.label == "holiday.png"
        assert fingerprint.media_type == "image/png"

    def test_zero_length_file(self, make_file):
        """Test that an empty file has the empty-stream checksum."""
        path = make_file("empty.bin", b"")

        fingerprint = compute_full_fingerprint(path)

        assert fingerprint.checksum == 0
        assert fingerprint.checksum_hex == "00000000"
        assert fingerprint.size_bytes == 0

    def test_rejects_non_positive_buffer(self, make_file):
        """Test that an invalid buffer size is a programming error."""
        path = make_file("data.bin", b"x")

        with pytest.raises(ValueError):
            compute_full_fingerprint(path, buffer_size=0)


class TestMediaTypeTiers:
    """Tests for the order in which detection tiers run."""

    def test_extension_hit_skips_sniffing(self, make_file):
        """Test that a known extension avoids both peek and content sniffing."""
        detector = SpyDetector()
        path = make_file("photo.jpg", OPAQUE)

        outcome = run_full_fingerprint(path, detector=detector)

        assert outcome.fingerprint.media_type == "image/jpeg"
        assert outcome.media_type_source == MediaTypeSource.EXTENSION
        assert detector.peek_calls == []
        assert detector.detect_calls == []

    def test_text_file_uses_peek(self, make_file):
        """Test that a 1 KB text file is classified from its only buffer."""
        content = (b"remember the milk\n" * 60)[:1024]
        path = make_file("note.txt", content)
        detector = SpyDetector(extension_table={})

        outcome = run_full_fingerprint(path, detector=detector)

        assert outcome.fingerprint.media_type == "text/plain"
        assert outcome.media_type_source == MediaTypeSource.PEEK
        assert detector.peek_calls == [(content, "note.txt")]
        assert detector.detect_calls == []

    def test_peek_sees_only_first_chunk(self, make_file, patterned_bytes):
        """Test that peek runs once, on the first buffer."""
        data = b"\x89PNG\r\n\x1a\n" + patterned_bytes(10 * KB)
        path = make_file("upload", data)
        detector = SpyDetector(extension_table={})

        outcome = run_full_fingerprint(path, detector=detector, buffer_size=1000)

        assert len(detector.peek_calls) == 1
        assert detector.peek_calls[0][0] == data[:1000]
        assert outcome.fingerprint.media_type == "image/png"
        assert outcome.fingerprint.checksum == zlib.crc32(data)

    def test_falls_back_to_content_detection(self, make_file):
        """Test that the costly path runs only when peek is inconclusive."""
        path = make_file("blob", OPAQUE)
        detector = SpyDetector(extension_table={})

        outcome = run_full_fingerprint(path, detector=detector)

        assert outcome.fingerprint.media_type == "application/octet-stream"
        assert outcome.media_type_source == MediaTypeSource.CONTENT
        assert len(detector.peek_calls) == 1
        assert len(detector.detect_calls) == 1

    def test_empty_file_falls_back_to_content_detection(self, make_file):
        """Test that an empty file has no first buffer to peek at."""
        path = make_file("empty", b"")
        detector = SpyDetector(extension_table={})

        outcome = run_full_fingerprint(path, detector=detector)

        assert detector.peek_calls == []
        assert len(detector.detect_calls) == 1
        assert outcome.fingerprint.checksum == 0

    def test_peek_failure_is_not_fatal(self, make_file):
        """Test that a failing peek degrades to content detection."""
        path = make_file("blob", OPAQUE)
        detector = SpyDetector(extension_table={}, peek_error=RuntimeError("sniffer crashed"))

        outcome = run_full_fingerprint(path, detector=detector)

        assert outcome.success
        assert outcome.fingerprint.checksum == zlib.crc32(OPAQUE)
        assert outcome.fingerprint.media_type == "application/octet-stream"
        assert "sniffer crashed" in outcome.media_type_error
        assert outcome.media_type_error_category == 'unknown'

    def test_content_detection_failure_keeps_checksum(self, make_file):
        """Test that media type failure leaves the checksum intact."""
        path = make_file("blob", OPAQUE)
        detector = SpyDetector(extension_table={}, detect_error=RuntimeError("boom"))

        fingerprint = compute_full_fingerprint(path, detector=detector)

        assert fingerprint.checksum == zlib.crc32(OPAQUE)
        assert fingerprint.media_type is None

    def test_unreadable_file_during_content_detection(self, make_file, monkeypatch):
        """Test that a sniffer I/O failure is categorized and the checksum kept."""
        path = make_file("blob", OPAQUE)

        def unreadable(obj):
            raise OSError(5, "Input/output error")

        monkeypatch.setattr(mime_detector.filetype, "guess", unreadable)

        outcome = run_full_fingerprint(path, detector=MediaTypeDetector(extension_table={}))

        assert outcome.success
        assert outcome.fingerprint.checksum == zlib.crc32(OPAQUE)
        assert outcome.fingerprint.media_type is None
        assert outcome.media_type_source is None
        assert outcome.media_type_error_category == 'media_type'
        assert "Input/output error" in outcome.media_type_error


class TestFullFingerprintFailures:
    """Tests for the best-effort failure contract."""

    def test_missing_file(self, tmp_path):
        """Test that a missing file yields a sentinel checksum, not an exception."""
        path = tmp_path / "missing.png"

        outcome = run_full_fingerprint(path)

        assert not outcome.success
        assert outcome.error_category == 'not_found'
        assert outcome.fingerprint == FileFingerprint(
            checksum=None, media_type="image/png", label="missing.png", size_bytes=0
        )
        assert compute_full_fingerprint(path).failed

    def test_directory(self, tmp_path):
        """Test that a read error is reported through the outcome."""
        directory = tmp_path / "folder"
        directory.mkdir()

        fingerprint = compute_full_fingerprint(directory)

        assert fingerprint.checksum is None
        assert fingerprint.checksum_hex is None

    def test_read_error_after_peek_keeps_media_type(self, make_file, patterned_bytes, monkeypatch):
        """Test that an I/O error mid-file drops the checksum but keeps the peeked type."""
        data = b"\x89PNG\r\n\x1a\n" + patterned_bytes(3000)
        path = make_file("upload", data)
        real_update = Crc32.update
        chunks = []

        def failing_update(self, chunk, *args, **kwargs):
            chunks.append(len(chunk))
            if len(chunks) == 2:
                raise OSError(5, "Input/output error")
            return real_update(self, chunk, *args, **kwargs)

        monkeypatch.setattr(Crc32, "update", failing_update)

        outcome = run_full_fingerprint(path, detector=MediaTypeDetector(extension_table={}), buffer_size=1000)

        assert not outcome.success
        assert outcome.error_category == 'io'
        assert outcome.fingerprint.checksum is None
        assert outcome.fingerprint.media_type == "image/png"
        assert outcome.fingerprint.size_bytes == len(data)
        assert outcome.media_type_source == MediaTypeSource.PEEK
        assert chunks == [1000, 1000]


class TestDetectMediaType:
    """Tests for detect_media_type."""

    def test_extension_needs_no_file(self, tmp_path):
        """Test that an extension hit never touches the file."""
        assert detect_media_type(tmp_path / "absent.png") == "image/png"

    def test_label_only_peek(self, tmp_path):
        """Test the label-only peek through filetype's extension list."""
        detector = SpyDetector(extension_table={})

        assert detect_media_type(tmp_path / "absent.mp4", detector=detector) == "video/mp4"
        assert detector.peek_calls == [(None, "absent.mp4")]
        assert detector.detect_calls == []

    def test_content_fallback(self, make_file):
        """Test that files without a usable name are sniffed."""
        path = make_file("README", b"Just some text.\n")

        assert detect_media_type(path, detector=MediaTypeDetector(extension_table={})) == "text/plain"

    def test_label_override(self, make_file):
        """Test that the override label is used for lookup."""
        path = make_file("download.tmp", b"%PDF-1.4\n")

        assert detect_media_type(path, label="report.pdf") == "application/pdf"

    def test_failure_returns_none(self, tmp_path):
        """Test that a failing content sniff returns None rather than raising."""
        detector = MediaTypeDetector(extension_table={})

        assert detect_media_type(tmp_path / "missing", detector=detector) is None
