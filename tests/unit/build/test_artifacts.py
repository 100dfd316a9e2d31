"""Tests for build artifact packaging."""

import base64
import json
import zlib
from pathlib import Path

import pytest

from contentdb.build.artifacts import compress_dump, decompress_dump, read_artifacts, write_artifacts
from contentdb.core.exceptions import ContentError

STATEMENTS = [
    "CREATE TABLE _info (id VARCHAR PRIMARY KEY, version VARCHAR)",
    "INSERT INTO _info (id, version) VALUES ('version', 'v1-abc')",
]


class TestCompression:
    """Tests for compress_dump and decompress_dump."""

    def test_format(self):
        """The artifact is base64 of deflated JSON."""
        artifact = compress_dump(STATEMENTS)
        payload = zlib.decompress(base64.b64decode(artifact))

        assert json.loads(payload) == STATEMENTS

    def test_unicode(self):
        """Non-ASCII statements survive packaging."""
        statements = ["INSERT INTO t (v) VALUES ('héllo ✓')"]
        assert decompress_dump(compress_dump(statements)) == statements

    def test_invalid_artifact(self):
        """Garbage is rejected."""
        with pytest.raises(ContentError, match="Invalid dump artifact"):
            decompress_dump("not base64!")

    def test_wrong_payload(self):
        """A payload that is not a statement list is rejected."""
        artifact = base64.b64encode(zlib.compress(b'{"a": 1}')).decode()
        with pytest.raises(ContentError, match="list of statements"):
            decompress_dump(artifact)


class TestWriteArtifacts:
    """Tests for write_artifacts and read_artifacts."""

    def test_writes_all_files(self, tmp_path: Path, posts):
        """Dump, version, index and types are written."""
        artifacts = write_artifacts(tmp_path / "out", posts, STATEMENTS, "v1-abc")

        assert artifacts.version.read_text() == "v1-abc\n"
        assert decompress_dump(artifacts.dump.read_text()) == STATEMENTS
        index = json.loads(artifacts.index.read_text())
        assert list(index) == ["posts", "_info"]
        assert "class PostsItem(TypedDict):" in artifacts.types.read_text()

    def test_read_back(self, tmp_path: Path, posts):
        """Artifacts read back to statements and version."""
        write_artifacts(tmp_path, posts, STATEMENTS, "v1-abc")

        assert read_artifacts(tmp_path) == (STATEMENTS, "v1-abc")

    def test_read_missing(self, tmp_path: Path):
        """Missing artifacts are reported."""
        with pytest.raises(ContentError, match="Missing build artifact"):
            read_artifacts(tmp_path)
