from .classifier import LogClassification, classify
from .codec import decode_event, encode_event
from .dispatcher import EventDispatcher, MirrorStore

__all__ = [
    "LogClassification",
    "classify",
    "decode_event",
    "encode_event",
    "EventDispatcher",
    "MirrorStore",
]
