"""Host and listener protocol logic of a room member."""

__all__ = [
    "DriftCorrection",
    "HostRole",
    "ListenerRole",
    "SyncRole",
    "evaluate_drift",
]

from .base import SyncRole
from .drift import DriftCorrection, evaluate_drift
from .host import HostRole
from .listener import ListenerRole
