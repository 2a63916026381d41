"""Bitwarden Secrets Manager CLI (bws) wrapper."""
import logging
import subprocess
from typing import Optional, Sequence

from .errors import ExecutionError

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "bws"


class BwsClient:
    """Runs bws with the session's credentials prefixed to every call.

    The client holds only read-only settings, so one instance is shared by
    every resource and data source of a provider session.
    """

    def __init__(
        self,
        access_token: str,
        server_url: Optional[str] = None,
        binary: str = DEFAULT_BINARY,
        timeout: Optional[float] = None,
    ):
        self._access_token = access_token
        self._server_url = server_url or ""
        self._binary = binary
        self._timeout = timeout

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def binary(self) -> str:
        return self._binary

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def __repr__(self) -> str:
        return f"BwsClient(binary={self._binary!r}, server_url={self._server_url!r}, timeout={self._timeout!r})"

    def build_command(self, args: Sequence[str]) -> list:
        """
        Build the full argv for a bws call.

        Token first, then the server URL flag if one is configured, then the
        caller's arguments.
        """
        command = [self._binary, "--access-token", self._access_token]
        if self._server_url:
            command.extend(["--server-url", self._server_url])
        command.extend(args)
        return command

    def execute(self, args: Sequence[str], timeout: Optional[float] = None) -> bytes:
        """
        Run bws and return its raw stdout.

        Args:
            args: Subcommand and its arguments (e.g. ["secret", "get", id])
            timeout: Seconds before the child is killed (defaults to the
                     client timeout; None waits indefinitely)

        Returns:
            Raw stdout bytes, not decoded

        Raises:
            ExecutionError: If bws cannot be started, exits non-zero or times out.
                            The message is bws's stderr verbatim.
        """
        if timeout is None:
            timeout = self._timeout

        # Arguments can carry secret values, only the subcommand is logged
        subcommand = " ".join(args[:2])
        logger.debug(f"Running {self._binary} {subcommand}")

        try:
            result = subprocess.run(
                self.build_command(args),
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"{self._binary} {subcommand} timed out after {timeout}s")
            raise ExecutionError(f"{self._binary} timed out after {timeout}s")
        except OSError as e:
            logger.error(f"Failed to start {self._binary}: {e.strerror or e}")
            raise ExecutionError(str(e.strerror or e))

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            logger.debug(f"{self._binary} {subcommand} exited with code {result.returncode}")
            raise ExecutionError(stderr, returncode=result.returncode)

        return result.stdout
