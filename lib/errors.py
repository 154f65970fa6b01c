"""Exceptions raised by the installer"""

from typing import List, Optional


class InstallerError(Exception):
    """Base class for failures that abort the current command"""


class PrerequisiteError(InstallerError):
    """A required tool or cluster connection is not available"""


class UnknownServiceError(InstallerError):
    """Requested service is not in the catalog"""


class ConfigurationError(InstallerError):
    """A setting or the test configuration file is invalid"""


class KubectlError(InstallerError):
    """A kubectl invocation failed, timed out or could not be started"""

    def __init__(self, cmd: List[str], returncode: Optional[int] = None,
                 stderr: str = "", reason: Optional[str] = None):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        if reason is None:
            reason = f"exit code {returncode}"
        message = f"'{' '.join(cmd)}' failed: {reason}"
        if stderr:
            message += f"\n   {stderr.strip()[:500]}"
        super().__init__(message)
