"""Pytest configuration and shared fixtures"""

import asyncio
import os
import stat
import sys
import textwrap
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

# Prelude shared by every fake yt-dlp script
FAKE_YTDLP_PRELUDE = f"""#!{sys.executable}
import json
import os
import sys
import time

args = sys.argv[1:]
if "--version" in args:
    print("2024.12.13")
    sys.exit(0)


def out_dir():
    return os.path.dirname(args[args.index("-o") + 1])


def audio_format():
    return args[args.index("--audio-format") + 1]


def write(name, data=b"audio"):
    with open(os.path.join(out_dir(), name), "wb") as f:
        f.write(data)

"""


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables before each test"""
    for key in list(os.environ.keys()):
        if key.startswith("APP_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_ytdlp(tmp_path: Path) -> Callable[[str], str]:
    """Factory writing an executable stand-in for yt-dlp.

    The body runs after FAKE_YTDLP_PRELUDE and can use ``args``, ``out_dir()``,
    ``audio_format()`` and ``write()``.
    """
    counter = {"n": 0}

    def make(body: str) -> str:
        counter["n"] += 1
        script = tmp_path / f"fake-yt-dlp-{counter['n']}"
        script.write_text(FAKE_YTDLP_PRELUDE + textwrap.dedent(body))
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return make


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    """Temp root for scratch workspaces."""
    root = tmp_path / "scratch"
    root.mkdir()
    return root


def make_process(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> MagicMock:
    """Build a mock asyncio subprocess whose pipes hold the given bytes.

    Must be called from inside a running event loop.
    """
    process = MagicMock()
    process.pid = 4242
    process.returncode = None

    stdout_reader = asyncio.StreamReader()
    stdout_reader.feed_data(stdout)
    stdout_reader.feed_eof()
    stderr_reader = asyncio.StreamReader()
    stderr_reader.feed_data(stderr)
    stderr_reader.feed_eof()
    process.stdout = stdout_reader
    process.stderr = stderr_reader

    async def wait() -> int:
        process.returncode = returncode
        return returncode

    process.wait = AsyncMock(side_effect=wait)
    return process


@pytest.fixture
def process_factory() -> Callable[..., MagicMock]:
    """Factory for mock yt-dlp processes (see make_process)."""
    return make_process
