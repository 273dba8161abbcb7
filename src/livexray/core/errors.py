"""Exception taxonomy for the runtime state bridge.

Only two families ever reach callers as exceptions:

- command outcomes on the host (`CommandTimeoutError`, `CommandFailedError`),
  raised out of the future returned by `CommandQueue.queue_command`;
- protocol problems on the HTTP surface (`ProtocolError`), mapped to a JSON
  error body by the handlers registered in `create_app`.

Serialization and transport failures never raise; they degrade to
placeholder text (see `livexray.core.serializer`).
"""

from __future__ import annotations


class XrayError(Exception):
    """Base class for every bridge error."""


class CommandTimeoutError(XrayError, TimeoutError):
    """A queued command was not answered by the client runtime in time."""

    def __init__(self, command: str) -> None:
        super().__init__(f'Command "{command}" timed out')
        self.command = command


class CommandFailedError(XrayError):
    """The client runtime executed a command and reported an error string."""

    def __init__(self, command: str, error: str) -> None:
        super().__init__(error)
        self.command = command
        self.error = error


class UnknownCommandError(XrayError, LookupError):
    """The client runtime received a command name outside the dispatch table."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command not found: {command}")
        self.command = command


class ProtocolError(XrayError):
    """Bad request on the HTTP surface (invalid JSON, missing params, auth, size)."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


__all__ = [
    "XrayError",
    "CommandTimeoutError",
    "CommandFailedError",
    "UnknownCommandError",
    "ProtocolError",
]
