"""Shared component check utilities.

Reusable async functions for checking the external binaries the service
shells out to: yt-dlp and the ffmpeg it uses for conversion. Used by the
startup log and the health check endpoints.
"""

import asyncio
import contextlib
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

VersionParser = Callable[[str], Optional[str]]


@dataclass
class CheckResult:
    """Result of a binary availability check.

    Attributes:
        name: Component name ("ytdlp" or "ffmpeg")
        available: Whether the binary ran and exited cleanly
        version: Version string if it could be read
        error: Error message if the check failed
    """

    name: str
    available: bool
    version: Optional[str] = None
    error: Optional[str] = None


async def _run_version_command(
    name: str,
    command: List[str],
    timeout: float,
    parse_version: VersionParser,
) -> CheckResult:
    """Run ``command`` and read a version from its stdout.

    Args:
        name: Component name for the result.
        command: Command and arguments to execute.
        timeout: Maximum time to wait in seconds.
        parse_version: Extracts the version from decoded stdout.

    Returns:
        CheckResult with availability status.
    """
    proc = None
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        if proc:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
        return CheckResult(name=name, available=False, error=f"{command[0]} check timed out")
    except (FileNotFoundError, PermissionError):
        return CheckResult(name=name, available=False, error=f"{command[0]} not found")
    except OSError as e:
        return CheckResult(name=name, available=False, error=str(e))

    if proc.returncode != 0:
        return CheckResult(
            name=name,
            available=False,
            error=f"{command[0]} returned non-zero exit code {proc.returncode}",
        )

    version = parse_version(stdout.decode("utf-8", errors="replace"))
    return CheckResult(name=name, available=True, version=version)


def _first_line(output: str) -> Optional[str]:
    lines = output.strip().splitlines()
    return lines[0].strip() if lines else None


def _ffmpeg_version(output: str) -> Optional[str]:
    match = re.search(r"ffmpeg version (\S+)", output)
    return match.group(1) if match else "unknown"


async def check_ytdlp(binary: str = "yt-dlp", timeout: float = 5.0) -> CheckResult:
    """Check yt-dlp availability and version.

    Args:
        binary: yt-dlp executable name or path.
        timeout: Maximum time to wait for the check in seconds.
    """
    return await _run_version_command("ytdlp", [binary, "--version"], timeout, _first_line)


async def check_ffmpeg(timeout: float = 5.0) -> CheckResult:
    """Check ffmpeg availability and version."""
    return await _run_version_command("ffmpeg", ["ffmpeg", "-version"], timeout, _ffmpeg_version)
