"""Errors recovered by the session controller."""

from .models.session import NoticeKind


class WhisprError(Exception):
    """Base class for recoverable Whispr errors."""

    notice_kind = NoticeKind.ENGINE_FAILURE


class PermissionDenied(WhisprError):
    """The speech engine could not start (e.g. no microphone permission)."""

    notice_kind = NoticeKind.PERMISSION_DENIED


class EngineFailure(WhisprError):
    """The speech engine failed to start or failed mid-capture."""

    notice_kind = NoticeKind.ENGINE_FAILURE


class EmptyClipboard(WhisprError):
    """Nothing on the clipboard to paste."""

    notice_kind = NoticeKind.EMPTY_CLIPBOARD
