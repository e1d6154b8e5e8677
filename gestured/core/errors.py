from __future__ import annotations


class GesturedError(Exception):
    """Base class for everything gestured raises on purpose."""


class ConfigMissing(GesturedError):
    """No configuration document at startup. The daemon must not start."""


class ConfigInvalid(GesturedError):
    """The document exists but could not be read or parsed."""


class ReloadFailure(GesturedError):
    """A reload could not replace the document; the previous one stays live."""


class DispatchFailure(GesturedError):
    """An action could not be executed."""


class ReloadRequestError(GesturedError):
    """The reload call reached nobody useful, timed out, or was refused."""


class DaemonNotRunning(ReloadRequestError):
    pass


class EventSourceUnavailable(GesturedError):
    """The input backend could not be started (missing tool, no permission)."""
