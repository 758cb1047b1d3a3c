"""Per-record outcomes and the batch report built from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping

    from .records import StoredRecord


@dataclass(frozen=True, slots=True)
class Success:
    record: StoredRecord | None
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class Failure:
    error: Exception
    data: Mapping[str, Any]
    ok: Literal[False] = False


type ReconciliationOutcome = Success | Failure


@dataclass(frozen=True, slots=True)
class ImportFailure:
    """One input row that could not be imported, as it was submitted."""

    error: Exception
    data: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {"type": type(self.error).__name__, "message": str(self.error)},
            "data": self.data,
        }


@dataclass(slots=True)
class ImportReport:
    """Failures of an import run. Successful rows are deliberately not retained."""

    failures: list[ImportFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {"failures": [failure.to_dict() for failure in self.failures]}


async def capture_outcome(
    operation: Callable[[Mapping[str, Any]], Awaitable[StoredRecord | None]],
    record: Mapping[str, Any],
) -> ReconciliationOutcome:
    """Run ``operation`` for ``record`` and turn any error into a ``Failure``."""

    try:
        stored = await operation(record)
    except Exception as exc:  # noqa: BLE001
        return Failure(error=exc, data=record)
    return Success(record=stored)


def collect_report(outcomes: Iterable[ReconciliationOutcome]) -> ImportReport:
    failures = [
        ImportFailure(error=outcome.error, data=outcome.data)
        for outcome in outcomes
        if isinstance(outcome, Failure)
    ]
    return ImportReport(failures=failures)
