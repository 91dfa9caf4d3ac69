"""Ordered deletion of an event and every record that references it.

The event row is the authoritative existence marker, so it goes last and is
the only step whose failure aborts the operation. Dependent tables are
optional in some deployments; a missing relation is skipped quietly. Any
other failure there is logged and left to the ON DELETE CASCADE on the
dependent foreign keys, so it never blocks removing the event row.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from eventpages.config.table_names import TableNames
from eventpages.events.dtos import EventForbiddenError, EventNotFoundError
from eventpages.events.repository import DEPENDENT_TABLES, EventRepository
from eventpages.store.client import StoreError

logger = logging.getLogger(__name__)


class StepPolicy(str, Enum):
    BEST_EFFORT = "best_effort"
    TOLERATE_MISSING = "tolerate_missing"
    FATAL = "fatal"


class StepStatus(str, Enum):
    DELETED = "deleted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class CascadeStep:
    table: TableNames
    policy: StepPolicy


@dataclass(frozen=True)
class StepOutcome:
    table: TableNames
    status: StepStatus
    deleted: int = 0
    error: Exception | None = None


@dataclass
class CascadeReport:
    event_id: UUID
    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is StepStatus.FAILED]

    @property
    def skipped_steps(self) -> list[StepOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is StepStatus.SKIPPED]

    def deleted_count(self, table: TableNames) -> int:
        return sum(outcome.deleted for outcome in self.outcomes if outcome.table is table)


class CascadeAbortedError(Exception):
    """Raised when a fatal step fails. Steps before it may have run."""

    def __init__(self, report: CascadeReport, step: CascadeStep, cause: Exception) -> None:
        self.report = report
        self.step = step
        self.cause = cause
        super().__init__(f"Deleting {step.table.value} for event '{report.event_id}' failed: {cause}")


DEFAULT_STEPS = (
    *(CascadeStep(table, StepPolicy.BEST_EFFORT) for table in DEPENDENT_TABLES),
    CascadeStep(TableNames.EVENTS, StepPolicy.FATAL),
)


class CascadeDeletionCoordinator:
    def __init__(
        self,
        repository: EventRepository,
        steps: tuple[CascadeStep, ...] = DEFAULT_STEPS,
    ) -> None:
        if not steps or steps[-1].table is not TableNames.EVENTS:
            raise ValueError("The event row must be the last cascade step")
        self.repository = repository
        self.steps = steps

    async def delete(self, owner_id: UUID, event_id: UUID) -> CascadeReport:
        """Run every step in order and return once the event row is gone.

        Raises EventNotFoundError before touching anything when the caller
        does not own the event, and CascadeAbortedError when a fatal step fails.
        """
        await self.repository.get_owned(owner_id, event_id)

        report = CascadeReport(event_id=event_id)
        for step in self.steps:
            try:
                deleted = await self._run(step, owner_id, event_id)
            except (StoreError, EventNotFoundError, EventForbiddenError) as e:
                report.outcomes.append(self._on_failure(step, event_id, e))
                if report.outcomes[-1].status is StepStatus.FAILED and step.policy is not StepPolicy.BEST_EFFORT:
                    raise CascadeAbortedError(report, step, e) from e
                continue
            report.outcomes.append(StepOutcome(step.table, StepStatus.DELETED, deleted))

        logger.info(
            f"Deleted event {event_id} "
            f"({len(report.skipped_steps)} skipped, {len(report.failed_steps)} failed steps)"
        )
        return report

    async def _run(self, step: CascadeStep, owner_id: UUID, event_id: UUID) -> int:
        if step.table is TableNames.EVENTS:
            await self.repository.delete_owned(owner_id, event_id)
            return 1
        return await self.repository.delete_dependents(step.table, event_id)

    def _on_failure(self, step: CascadeStep, event_id: UUID, error: Exception) -> StepOutcome:
        missing = isinstance(error, StoreError) and error.is_missing_relation
        if missing and step.policy is not StepPolicy.FATAL:
            logger.info(f"Skipping {step.table.value} for event {event_id}: relation does not exist")
            return StepOutcome(step.table, StepStatus.SKIPPED, error=error)

        if step.policy is StepPolicy.BEST_EFFORT:
            logger.warning(f"Could not delete {step.table.value} rows of event {event_id}: {error}")
        else:
            logger.error(f"Deleting {step.table.value} of event {event_id} failed, aborting: {error}")
        return StepOutcome(step.table, StepStatus.FAILED, error=error)
