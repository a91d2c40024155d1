"""Fatal error taxonomy for a trimming run.

Every class here aborts the run. Skippable conditions (wrong extension,
directory, output subtree, existing output) never raise.
"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TrimJob


class VtrimError(Exception):
    """Base class for all vtrim errors."""


class ConfigError(VtrimError):
    """Invalid configuration detected before any work starts."""


class ToolNotFoundError(ConfigError):
    """The external trimming tool cannot be located."""

    def __init__(self, tool_path: str):
        super().__init__(f"{tool_path} is missing. Please install vlc before continuing")
        self.tool_path = tool_path


class TraversalError(VtrimError):
    """Unreadable entry or unresolvable relative path during the walk."""


class ProcessingError(VtrimError):
    """The external tool failed for a job."""

    def __init__(self, job: "TrimJob", message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.job = job
        self.returncode = returncode
        self.output = output


class QueueClosedError(VtrimError):
    """Queue used after it was closed, or closed twice."""


class RunAborted(VtrimError):
    """Several fatal errors occurred in one run."""

    def __init__(self, errors: List[Exception]):
        lines = "; ".join(str(e) for e in errors)
        super().__init__(f"Run aborted with {len(errors)} errors: {lines}")
        self.errors = errors
