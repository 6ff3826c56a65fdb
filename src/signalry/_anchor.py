"""Data anchor — plain Python structures that hold all reactive state.

Observables, Computeds and Effects are thin handles holding an integer id.
Everything they know lives in the dicts below, keyed by that id.

Subscriptions are keyed by derivation id. An Effect is held strongly by the
cells it reads, so it stays active until disposed. A Computed is held weakly:
once nothing else references it, it is collected. Every handle registers a
finalizer that releases its entries.
"""

import itertools

# Observable state
values: dict[int, object] = {}
equality_fns: dict[int, object] = {}  # obs_id -> (old, new) -> bool
observers: dict[int, dict[int, object]] = {}  # cell_id -> {deriv_id: effect or weakref to computed}

# Derivation state (Computed + Effect)
dependencies: dict[int, set[int]] = {}  # deriv_id -> ids of cells it read last run
dirty_flags: dict[int, bool] = {}
failed: dict[int, bool] = {}  # computed_id -> last evaluation raised
cached_values: dict[int, object] = {}
derivation_fns: dict[int, object] = {}  # deriv_id -> callable
disposed: dict[int, bool] = {}
cleanups: dict[int, object] = {}  # effect_id -> teardown registered by last run

_tables = (
    values,
    equality_fns,
    observers,
    dependencies,
    dirty_flags,
    failed,
    cached_values,
    derivation_fns,
    disposed,
    cleanups,
)

# itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def unlink(deriv_id: int) -> None:
    """Unsubscribe a derivation from every cell it read last run."""
    deps = dependencies.get(deriv_id)
    if not deps:
        return
    for cell_id in deps:
        subscribers = observers.get(cell_id)
        if subscribers is not None:
            subscribers.pop(deriv_id, None)
    deps.clear()


def release(cell_id: int) -> None:
    """Drop every entry held for cell_id. Safe to call more than once."""
    unlink(cell_id)
    for table in _tables:
        table.pop(cell_id, None)


def size() -> int:
    """Total number of entries across all tables. Useful for testing."""
    return sum(len(table) for table in _tables)
