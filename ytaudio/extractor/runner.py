"""yt-dlp subprocess execution.

Both output pipes are drained concurrently while the child runs, so a chatty
process never stalls on a full pipe buffer.
"""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

import structlog

from ytaudio.extractor.exceptions import ExternalToolError, ToolNotFoundError

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 64 * 1024

# An unterminated line is logged as-is once it grows past this many bytes
MAX_PENDING_LINE = CHUNK_SIZE


@dataclass
class ToolResult:
    """Outcome of a finished yt-dlp invocation."""

    returncode: int
    stdout: str
    stderr: str


class LineBuffer:
    """Reassembles output lines that arrive split across read chunks."""

    def __init__(self, max_pending: int = MAX_PENDING_LINE):
        self.max_pending = max_pending
        self._pending = b""

    def feed(self, chunk: bytes) -> List[bytes]:
        """Add a chunk and return every line it completed, without line endings."""
        lines = (self._pending + chunk).splitlines(keepends=True)
        self._pending = b""
        if lines and not lines[-1].endswith((b"\n", b"\r")):
            self._pending = lines.pop()
            if len(self._pending) > self.max_pending:
                lines.append(self._pending)
                self._pending = b""
        return [line.rstrip(b"\r\n") for line in lines]

    def flush(self) -> List[bytes]:
        """Return the trailing unterminated line, if any."""
        pending, self._pending = self._pending, b""
        return [pending] if pending else []


class ToolRunner:
    """Runs the extraction tool as a child process, one call per invocation."""

    def __init__(self, binary: str = "yt-dlp", kill_on_cancel: bool = False):
        """
        Initialize the runner.

        Args:
            binary: Executable name or path of yt-dlp
            kill_on_cancel: Kill and reap the child before a cancellation
                propagates. When False the child is left to finish and is
                reaped in the background.
        """
        self.binary = binary
        self.kill_on_cancel = kill_on_cancel
        self._detached: Set["asyncio.Task[None]"] = set()

    async def run(self, args: Sequence[str], capture_stdout: bool = False) -> ToolResult:
        """
        Run yt-dlp and wait for it to exit.

        Args:
            args: Arguments passed after the executable
            capture_stdout: Keep stdout (JSON mode). Otherwise stdout is only logged.

        Returns:
            ToolResult for a zero exit status

        Raises:
            ToolNotFoundError: If the executable cannot be spawned
            ExternalToolError: If the process exits with a nonzero status
        """
        cmd = [self.binary, *args]
        logger.debug("ytdlp_spawn", command=cmd)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            logger.error("ytdlp_not_found", binary=self.binary, error=str(e))
            raise ToolNotFoundError(
                f"yt-dlp not found. Please ensure yt-dlp is installed: {e}"
            ) from e
        except OSError as e:
            logger.error("ytdlp_spawn_failed", binary=self.binary, error=str(e))
            raise ToolNotFoundError(f"yt-dlp could not be started: {e}") from e

        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []

        try:
            await asyncio.gather(
                self._drain(process.stdout, "stdout", stdout_chunks, log_lines=not capture_stdout),
                self._drain(process.stderr, "stderr", stderr_chunks, log_lines=True),
            )
            returncode = await process.wait()
        except asyncio.CancelledError:
            if self.kill_on_cancel:
                await self._kill(process)
            else:
                self._detach(process)
            raise

        stdout = b"".join(stdout_chunks).decode("utf-8", errors="replace") if capture_stdout else ""
        stderr = b"".join(stderr_chunks).decode("utf-8", errors="replace")

        logger.debug("ytdlp_exited", returncode=returncode, pid=process.pid)

        if returncode != 0:
            message = stderr.strip() or "yt-dlp failed"
            logger.warning("ytdlp_failed", returncode=returncode, stderr=message[:500])
            raise ExternalToolError(message, returncode=returncode)

        return ToolResult(returncode=returncode, stdout=stdout, stderr=stderr)

    async def _drain(
        self,
        stream: Optional[asyncio.StreamReader],
        name: str,
        sink: List[bytes],
        log_lines: bool,
    ) -> None:
        """Read a pipe until EOF, keeping its bytes and logging its lines."""
        if stream is None:
            return

        lines = LineBuffer()
        while True:
            chunk = await stream.read(CHUNK_SIZE)
            if not chunk:
                break
            sink.append(chunk)
            if log_lines:
                self._log_lines(name, lines.feed(chunk))

        if log_lines:
            self._log_lines(name, lines.flush())

    @staticmethod
    def _log_lines(name: str, lines: List[bytes]) -> None:
        for raw in lines:
            line = raw.decode("utf-8", errors="replace")
            if line.strip():
                logger.debug("ytdlp_output", stream=name, line=line)

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        """Kill the child and wait until it has been reaped."""
        if process.returncode is not None:
            return
        logger.info("ytdlp_killed_on_cancel", pid=process.pid)
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        # Shielded so a repeated cancellation cannot leave the child unreaped
        await asyncio.shield(self._reap(process))

    def _detach(self, process: asyncio.subprocess.Process) -> None:
        """Let the child finish unattended and reap it in the background."""
        if process.returncode is not None:
            return
        logger.info("ytdlp_detached", pid=process.pid)
        task = asyncio.ensure_future(self._reap(process))
        self._detached.add(task)
        task.add_done_callback(self._detached.discard)

    async def _reap(self, process: asyncio.subprocess.Process) -> None:
        """Drain and wait for a child so it neither blocks nor lingers as a zombie."""
        await asyncio.gather(
            self._drain(process.stdout, "stdout", [], log_lines=False),
            self._drain(process.stderr, "stderr", [], log_lines=False),
            return_exceptions=True,
        )
        returncode = await process.wait()
        logger.info("ytdlp_reaped", pid=process.pid, returncode=returncode)
