"""Exception hierarchy for the mirror pipeline.

Only :class:`UnrecoverableConfigError` is allowed to stop the process; the
subscription supervisor contains everything else per log bundle.
"""

from __future__ import annotations


class MirrorError(RuntimeError):
    pass


class ConfigError(MirrorError):
    """Configuration is missing or malformed."""


class TransportError(MirrorError):
    """Subscribe, receive or fetch against the chain failed."""


class UnrecoverableConfigError(MirrorError):
    """The subscription transport cannot be established at all."""


class DecodeError(MirrorError):
    """A binary payload could not be turned into a typed event or account."""


class MalformedPayload(DecodeError):
    pass


class PayloadTooShort(DecodeError):
    pass


class UnknownInstruction(MirrorError):
    pass


__all__ = [
    "MirrorError",
    "ConfigError",
    "TransportError",
    "UnrecoverableConfigError",
    "DecodeError",
    "MalformedPayload",
    "PayloadTooShort",
    "UnknownInstruction",
]
