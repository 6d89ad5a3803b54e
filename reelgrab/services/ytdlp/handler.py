"""
yt-dlp handler using the yt-dlp command line through a subprocess.
the tool is started as `<python> -m yt_dlp ...` so it runs from the same
environment reelgrab was installed into unless configured otherwise.
"""
import asyncio
import json
from typing import Any, Dict, List, Optional

from reelgrab.helper.errors import ExtractionFailed, MalformedOutput
from reelgrab.helper.logs import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace")


class YtDlpDownloadStream:
    """
    a running `yt-dlp -o -` process. stdout is read chunk by chunk by the caller,
    stderr is drained in the background so a chatty extractor never blocks on a
    full pipe.
    """

    def __init__(self, process: asyncio.subprocess.Process, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.process = process
        self.chunk_size = chunk_size
        self._stderr_chunks: List[bytes] = []
        self._stderr_task = asyncio.create_task(self._drain_stderr())

    async def _drain_stderr(self) -> None:
        if self.process.stderr is None:
            return
        while True:
            chunk = await self.process.stderr.read(self.chunk_size)
            if not chunk:
                break
            self._stderr_chunks.append(chunk)

    @property
    def diagnostics(self) -> Optional[str]:
        text = _decode(b"".join(self._stderr_chunks)).strip()
        return text or None

    async def read(self) -> bytes:
        return await self.process.stdout.read(self.chunk_size)

    async def wait(self) -> int:
        returncode = await self.process.wait()
        # let the drain catch up so diagnostics holds everything yt-dlp said
        await self._stderr_task
        return returncode

    async def close(self) -> None:
        if self.process.returncode is None:
            logger.info(f"stopping yt-dlp (pid {self.process.pid}) before it finished")
            try:
                self.process.kill()
            except ProcessLookupError:
                pass
            await self.process.wait()
        if not self._stderr_task.done():
            self._stderr_task.cancel()


class YtDlpExtractor:
    """
    runs yt-dlp for metadata (--dump-single-json) and for streaming downloads (-o -)
    """

    def __init__(
        self,
        python_bin: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: Optional[float] = None
    ):
        self.python_bin = python_bin
        self.chunk_size = chunk_size
        self.timeout = timeout

    def metadata_command(self, url: str) -> List[str]:
        return [self.python_bin, "-m", "yt_dlp", "--dump-single-json", "--no-playlist", "--", url]

    def download_command(self, url: str, format_id: str) -> List[str]:
        return [
            self.python_bin, "-m", "yt_dlp",
            "--no-playlist",
            "-f", str(format_id),
            "-o", "-",
            "--", url
        ]

    async def _spawn(self, cmd: List[str]) -> asyncio.subprocess.Process:
        logger.debug(f"running: {' '.join(cmd)}")
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            logger.error(f"could not start yt-dlp with {self.python_bin}: {e}")
            raise ExtractionFailed(details="Failed to run yt-dlp.") from e

    async def resolve_metadata(self, url: str) -> Dict[str, Any]:
        """dump the metadata of a single item as a dict"""
        process = await self._spawn(self.metadata_command(url))
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.warning(f"yt-dlp metadata for {url} timed out after {self.timeout}s")
            raise ExtractionFailed(details=f"yt-dlp timed out after {self.timeout}s")

        if process.returncode != 0:
            details = _decode(stderr).strip() or f"yt-dlp exited with {process.returncode}"
            logger.warning(f"yt-dlp metadata for {url} failed ({process.returncode}): {details}")
            raise ExtractionFailed(details=details)

        try:
            info = json.loads(_decode(stdout))
        except json.JSONDecodeError as e:
            raise MalformedOutput(details="Failed to parse format metadata from yt-dlp.") from e

        if not isinstance(info, dict):
            raise MalformedOutput(details="Failed to parse format metadata from yt-dlp.")
        return info

    async def open_download_stream(self, url: str, format_id: str) -> YtDlpDownloadStream:
        """start yt-dlp writing the selected format to stdout"""
        process = await self._spawn(self.download_command(url, format_id))
        return YtDlpDownloadStream(process, chunk_size=self.chunk_size)
