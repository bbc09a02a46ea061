from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .errors import ErrorKind


@dataclass(frozen=True)
class Row:
    """
    Immutable domain entity representing one starred repository.

    frozen=True guarantees immutability — once created, no field
    can ever be changed. Data flows one way: API → row → snapshot.

    Field names are OURS, not GitHub's ("stargazers_count" → stars).
    The translation happens in the normalizer, not here.
    """
    owner:       str
    repo:        str
    description: str | None
    language:    str | None
    stars:       int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class Snapshot:
    """The whole collection persisted under one cache key. Never merged."""
    rows: tuple[Row, ...] = ()


class SessionState(str, Enum):
    IDLE         = "idle"
    FETCHING     = "fetching"
    ACCUMULATING = "accumulating"
    COMPLETED    = "completed"
    FAILED       = "failed"
    ABANDONED    = "abandoned"


TERMINAL_STATES = frozenset({
    SessionState.COMPLETED,
    SessionState.FAILED,
    SessionState.ABANDONED,
})


@dataclass(frozen=True)
class FetchSession:
    """
    One run of the pagination state machine for one identity.

    Never mutated: every transition produces a new FetchSession via
    dataclasses.replace, so there is no doubt about which session's
    results are current.
    """
    identity:    str
    cache_key:   str
    generation:  int
    cursor:      int                   = 1
    accumulated: tuple[Row, ...]       = ()
    state:       SessionState          = SessionState.IDLE
    last_error:  ErrorKind | None      = None
    error_message: str | None          = None
    requests:    int                   = 0
    cache_written: bool                = False
    cache_error: str | None            = None

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES


@dataclass(frozen=True)
class StarsView:
    """
    Immutable value object handed to the presentation layer.
    Returned by the application service when a session ends.
    """
    identity:      str | None
    rows:          tuple[Row, ...]       = ()
    cached:        bool                  = False
    superseded:    bool                  = False
    error_kind:    ErrorKind | None      = None
    error_message: str | None            = None
    cache_written: bool                  = False
    requests:      int                   = 0
    cache_error:   str | None            = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None
