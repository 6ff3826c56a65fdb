"""Signalry: reusable reactive state primitives on a small signal runtime."""

from importlib.metadata import version as _version

__version__ = _version("signalry")

from signalry._tracking import get_pending_count, untracked
from signalry.equality import default_equals, structural_equals
from signalry.observable import Observable, ReadonlyView
from signalry.computed import Computed, computed
from signalry.reaction import Effect, autorun, effect
from signalry.action import action, transaction
from signalry.owner import Owner
from signalry.errors import SignalryError, SerializationError
from signalry.previous import ABSENT, computed_with_previous
from signalry.debounce import DebouncedRelay
from signalry.history import HistoryLog
from signalry.storage import FileStorage, MemoryStorage, Storage
from signalry.persistent import PersistentStore
from signalry.resource import Resource
from signalry.collection import UniqueCollection
from signalry.intercept import DebugCell, InterceptedCell, InterceptionLog, LogEntry, validator
from signalry.lens import Lens
from signalry.form import FormField, email, min_length, required

__all__ = [
    "Observable",
    "ReadonlyView",
    "Computed",
    "computed",
    "Effect",
    "effect",
    "autorun",
    "action",
    "transaction",
    "untracked",
    "get_pending_count",
    "default_equals",
    "structural_equals",
    "Owner",
    "SignalryError",
    "SerializationError",
    "ABSENT",
    "computed_with_previous",
    "DebouncedRelay",
    "HistoryLog",
    "Storage",
    "MemoryStorage",
    "FileStorage",
    "PersistentStore",
    "Resource",
    "UniqueCollection",
    "InterceptedCell",
    "InterceptionLog",
    "LogEntry",
    "validator",
    "DebugCell",
    "Lens",
    "FormField",
    "required",
    "email",
    "min_length",
]
