"""
PRRO Offline — Errors
=======================
Error types for the offline document chain.

State-machine violations are programming errors: they fail fast
and are never retried. Policy denials (duration limits) and
malformed input are reported to the caller, who decides what to do.
Recomputing a checksum or hash with the same inputs reproduces the
same failure, so nothing here is retried internally.
"""


class OfflineChainError(Exception):
    """Base error for all offline chain operations."""
    pass


# ══════════════════════════════════════════════════════════════
# STATE MACHINE
# ══════════════════════════════════════════════════════════════

class SessionStateError(OfflineChainError):
    """Operation invoked in a chain phase that does not allow it."""

    def __init__(self, operation: str, phase: str, detail: str):
        self.operation = operation
        self.phase = phase
        super().__init__(
            f"Cannot {operation} while chain is {phase}: {detail}"
        )


class NoActiveSessionError(SessionStateError):
    """Session-scoped operation with no open offline session."""

    def __init__(self, operation: str, phase: str):
        super().__init__(
            operation,
            phase,
            "no offline session is open. Call begin_session() first "
            "or reset() a closed builder.",
        )


class SessionAlreadyStartedError(SessionStateError):
    """begin_session() called on a builder that already has a session."""

    def __init__(self, phase: str):
        super().__init__(
            "begin session",
            phase,
            "a session was already started on this builder. "
            "Use a fresh builder or reset().",
        )


class SessionIdReusedError(SessionStateError, ValueError):
    """reset() asked to reopen a session id this builder already used."""

    def __init__(self, session_id: str, phase: str):
        self.session_id = session_id
        super().__init__(
            "reset",
            phase,
            f"session id {session_id} already opened a session on this "
            "builder and its local numbers would be issued twice. "
            "Request a new offline session id.",
        )


# ══════════════════════════════════════════════════════════════
# DURATION POLICY
# ══════════════════════════════════════════════════════════════

class SessionLimitExceededError(OfflineChainError):
    """Duration policy denies recording. Close the session or transmit."""

    def __init__(self, stats):
        self.stats = stats
        reasons = []
        if stats.over_daily_limit:
            reasons.append(
                f"session running {stats.current_duration} min"
            )
        if stats.over_monthly_limit:
            reasons.append(
                f"monthly usage {stats.monthly_duration} min"
            )
        if not reasons:
            reasons.append("no offline time remaining")
        super().__init__(
            f"Offline session {stats.session_id} cannot continue: "
            f"{'; '.join(reasons)}."
        )


# ══════════════════════════════════════════════════════════════
# CODECS
# ══════════════════════════════════════════════════════════════

class MalformedFiscalNumberError(OfflineChainError, ValueError):
    """Offline fiscal number failed structural checks."""

    def __init__(self, text, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(
            f"Malformed offline fiscal number {text!r}: {reason}"
        )


class PackageError(OfflineChainError, ValueError):
    """Binary package framing is corrupt."""

    def __init__(self, offset: int, detail: str):
        self.offset = offset
        self.detail = detail
        super().__init__(f"Invalid package at byte {offset}: {detail}")


class TruncatedPackageError(PackageError):
    """Fewer than 4 bytes left where a length prefix is expected."""

    def __init__(self, offset: int, remaining: int):
        self.remaining = remaining
        super().__init__(
            offset,
            f"incomplete length prefix ({remaining} of 4 bytes).",
        )


class PackageOverrunError(PackageError):
    """Declared frame length exceeds the remaining buffer."""

    def __init__(self, offset: int, declared: int, remaining: int):
        self.declared = declared
        self.remaining = remaining
        super().__init__(
            offset,
            f"frame declares {declared} bytes but only "
            f"{remaining} remain.",
        )


# ══════════════════════════════════════════════════════════════
# SPLICE
# ══════════════════════════════════════════════════════════════

class SpliceAnchorMissingError(OfflineChainError):
    """Base document has no place to insert offline chain metadata."""

    def __init__(self, anchors: tuple):
        self.anchors = anchors
        super().__init__(
            "Cannot apply offline metadata: document contains none of "
            f"{', '.join(anchors)}."
        )

