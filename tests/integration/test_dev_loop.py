"""End-to-end tests for the dev watch loop over the filesystem."""

import asyncio
import os
import time

import pytest

from contentdb import app
from contentdb.core.exceptions import DatabaseError
from contentdb.store.database import Database
from tests.fakes import write_file


async def _eventually(check, timeout: float = 5.0):
    """Poll ``check`` until it returns a truthy value."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            result = check()
        except DatabaseError:
            result = None
        if result:
            return result
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(0.05)


def _title(path, key):
    with Database(path) as db:
        row = db.first("SELECT title FROM posts WHERE contentId = ?", (key,))
    return row["title"] if row else None


def _touch_later(path):
    """Bump the modification time so a fast rewrite is still detected."""
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000))


class TestDevLoop:
    """Tests for app.dev against files on disk."""

    @pytest.mark.asyncio
    async def test_edits_reach_live_database(self, site_config, site):
        """Edits, additions and deletions are applied while running."""
        stop = asyncio.Event()
        task = asyncio.create_task(app.dev(site_config, stop))
        db_path = site_config.database_path
        content = site / "content"

        try:
            await _eventually(lambda: db_path.exists() and _title(db_path, "posts/hello.md"))
            assert _title(db_path, "posts/hello.md") == "Hello"

            edited = write_file(content, "posts/hello.md", "---\ntitle: Hello again\n---\n")
            _touch_later(edited)
            await _eventually(lambda: _title(db_path, "posts/hello.md") == "Hello again")

            write_file(content, "posts/fresh.md", "---\ntitle: Fresh\n---\n")
            await _eventually(lambda: _title(db_path, "posts/fresh.md") == "Fresh")

            (content / "posts" / "2.world.md").unlink()
            await _eventually(lambda: _title(db_path, "posts/2.world.md") is None)
        finally:
            stop.set()
            await asyncio.wait_for(task, timeout=5.0)

    @pytest.mark.asyncio
    async def test_broken_edit_keeps_previous_row(self, site_config, site):
        """A document that stops parsing keeps its last good row."""
        stop = asyncio.Event()
        task = asyncio.create_task(app.dev(site_config, stop))
        db_path = site_config.database_path
        content = site / "content"

        try:
            await _eventually(lambda: db_path.exists() and _title(db_path, "posts/hello.md"))

            broken = write_file(content, "posts/hello.md", "---\ntitle: [oops\n---\n")
            _touch_later(broken)
            write_file(content, "posts/after.md", "---\ntitle: After\n---\n")
            await _eventually(lambda: _title(db_path, "posts/after.md") == "After")

            assert _title(db_path, "posts/hello.md") == "Hello"
        finally:
            stop.set()
            await asyncio.wait_for(task, timeout=5.0)
        assert task.done() and task.exception() is None
