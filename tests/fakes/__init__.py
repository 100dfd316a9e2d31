"""In-memory fakes and fixtures helpers for tests."""

from tests.fakes.drivers import GatedMemoryDriver
from tests.fakes.files import write_file
from tests.fakes.storage import RecordingStorage

__all__ = ["GatedMemoryDriver", "RecordingStorage", "write_file"]
