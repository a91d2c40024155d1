import logging
import os
import shutil
import subprocess
import time
from typing import List, Optional
from vtrim.domain.errors import ProcessingError, ToolNotFoundError
from vtrim.domain.models import TrimJob

class VlcAdapter:
    """Wrapper around headless VLC for cutting the head off a media file."""

    def __init__(self, tool_path: str = "vlc", debug: bool = False):
        self.tool_path = tool_path
        self.debug = debug
        self.logger = logging.getLogger(__name__)
        self._resolved: Optional[str] = None

    def locate(self) -> str:
        """Resolves the executable on PATH (or as given). Raises ToolNotFoundError."""
        resolved = shutil.which(self.tool_path)
        if resolved is None:
            raise ToolNotFoundError(self.tool_path)
        # Jobs run with cwd=work_dir, so a relative tool path must not survive
        self._resolved = os.path.abspath(resolved)
        return self._resolved

    def _build_command(self, job: TrimJob) -> List[str]:
        """Constructs the vlc command line arguments."""
        return [
            self._resolved or self.tool_path,
            str(job.input_path),
            "--start-time", str(job.trim_offset_seconds),
            f"--sout=#file{{dst={job.output_path}}}",
            "-Idummy",
            "vlc://quit",
        ]

    def trim(self, job: TrimJob) -> str:
        """Runs the tool for one job and returns its combined output.

        Raises ProcessingError if the tool cannot be started or exits non-zero.
        """
        start_time = time.monotonic()
        (job.work_dir / job.output_path).parent.mkdir(parents=True, exist_ok=True)

        cmd = self._build_command(job)
        if self.debug:
            self.logger.debug(f"VLC_CMD: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(job.work_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                universal_newlines=True,
                # Output is only diagnostic; media titles need not be valid UTF-8
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ProcessingError(job, f"Failed to start {cmd[0]} for {job.input_path}: {exc}") from exc

        output = result.stdout or ""
        self.logger.info(f"combined out ({job.input_path}):\n{output}")

        if result.returncode != 0:
            raise ProcessingError(
                job,
                f"vlc exited with code {result.returncode} for {job.input_path}",
                returncode=result.returncode,
                output=output,
            )

        if self.debug:
            elapsed = time.monotonic() - start_time
            self.logger.debug(f"VLC_END: {job.input_path} elapsed={elapsed:.2f}s")
        return output
