"""
Outcome of a best-effort step.

ok:       the step did what it was asked.
degraded: an optional part was skipped (e.g. a logo that failed to decode);
          the caller carries on.
failed:   the step could not produce its output; the caller stops the stage.
"""
from dataclasses import dataclass
from typing import Any, Optional

OK = 'ok'
DEGRADED = 'degraded'
FAILED = 'failed'


@dataclass(frozen=True)
class Outcome:
    status: str
    reason: Optional[str] = None
    value: Any = None

    @classmethod
    def ok(cls, value=None):
        return cls(OK, None, value)

    @classmethod
    def degraded(cls, reason):
        return cls(DEGRADED, reason)

    @classmethod
    def failed(cls, reason):
        return cls(FAILED, reason)

    @property
    def is_ok(self):
        return self.status == OK

    @property
    def is_failed(self):
        return self.status == FAILED
