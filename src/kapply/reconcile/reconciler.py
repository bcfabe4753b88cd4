"""Reconciler: apply an ordered plan against the cluster API, idempotently."""

import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional
from ..cluster.base import ClusterAPI
from ..config.settings import KapplySettings
from ..contracts.drift import DriftReport
from ..contracts.outcome import ChangeAction, OutcomeStatus, ReconciliationOutcome, ReconciliationReport, SkipReason
from ..contracts.plan import ApplyPlan, PlanDirection
from ..ingest.models import ResourceSpec
from ..report.summary import build_report
from ..utils.errors import ClusterAPIError, KapplyError, OutcomeConflictError
from ..utils.logging import get_logger
from .diff import diff_resource
from .retry import call_with_retry

logger = get_logger("reconcile.reconciler")


class OutcomeLedger:
    """Write-once outcome slot per resource."""

    def __init__(self):
        self._slots: Dict[str, ReconciliationOutcome] = {}
        self._lock = threading.Lock()

    def record(self, outcome: ReconciliationOutcome) -> None:
        with self._lock:
            if outcome.name in self._slots:
                raise OutcomeConflictError(f"Outcome for '{outcome.name}' already recorded")
            self._slots[outcome.name] = outcome

    def get(self, name: str) -> Optional[ReconciliationOutcome]:
        with self._lock:
            return self._slots.get(name)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._slots

    def in_order(self, names: List[str]) -> List[ReconciliationOutcome]:
        with self._lock:
            return [self._slots[name] for name in names if name in self._slots]


class Reconciler:
    """
    Sole writer to the cluster for one run.

    Walks the plan in order: get, diff, then create/update (or delete for a
    destroy plan) only when needed. A resource whose blocker did not succeed
    is skipped without any API call; independent branches keep going.
    """

    def __init__(
        self,
        cluster: ClusterAPI,
        settings: Optional[KapplySettings] = None,
        sleep: Optional[Callable[[float], None]] = None
    ):
        self.cluster = cluster
        self.settings = settings or KapplySettings()
        self._sleep = sleep

    @property
    def workers(self) -> int:
        return self.settings.concurrency.workers

    def reconcile(self, plan: ApplyPlan, cancel_event: Optional[threading.Event] = None) -> ReconciliationReport:
        """
        Execute a plan and return the aggregated report.

        Args:
            plan: Apply or destroy plan from the scheduler
            cancel_event: Set to stop starting new resources; in-flight calls finish

        Returns:
            ReconciliationReport with one outcome per planned resource
        """
        cancel_event = cancel_event or threading.Event()
        ledger = OutcomeLedger()
        started = time.monotonic()

        logger.info(f"Starting {plan.direction.value} of {len(plan)} resources with {self.workers} worker(s)")

        if self.workers > 1:
            self._run_concurrent(plan, ledger, cancel_event)
        else:
            self._run_sequential(plan, ledger, cancel_event)

        report = build_report(
            plan,
            ledger.in_order(plan.order),
            cancelled=cancel_event.is_set(),
            duration_seconds=time.monotonic() - started,
        )
        logger.info(f"{plan.direction.value.capitalize()} finished: {report.counts}")
        return report

    def detect_drift(self, plan: ApplyPlan) -> DriftReport:
        """Compare every planned resource with live state; no mutating calls."""
        drifts = []
        for resource in plan.resources:
            observed, _ = call_with_retry(
                lambda r=resource: self.cluster.get(r.kind, r.name),
                self.settings.retry,
                f"get {resource}",
                sleep=self._sleep,
            )
            drift = diff_resource(resource, observed)
            logger.debug(f"Drift for {resource}: {drift.action.value if drift.action else 'in sync'}")
            drifts.append(drift)
        return DriftReport(resources=drifts)

    def _run_sequential(self, plan: ApplyPlan, ledger: OutcomeLedger, cancel_event: threading.Event) -> None:
        for resource in plan.resources:
            if cancel_event.is_set():
                ledger.record(_skipped(resource, SkipReason.CANCELLED))
                continue

            blocker = self._failed_blocker(resource, plan, ledger)
            if blocker is not None:
                ledger.record(_skipped(resource, SkipReason.BLOCKING_DEPENDENCY, blocker))
                continue

            ledger.record(self._execute(resource, plan.direction))

    def _run_concurrent(self, plan: ApplyPlan, ledger: OutcomeLedger, cancel_event: threading.Event) -> None:
        """Start a resource once every blocker has a terminal outcome."""
        pending: List[ResourceSpec] = list(plan.resources)
        running: Dict[Future, ResourceSpec] = {}

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="kapply") as pool:
            while pending or running:
                if cancel_event.is_set():
                    for resource in pending:
                        ledger.record(_skipped(resource, SkipReason.CANCELLED))
                    pending = []
                else:
                    pending = self._release_ready(pending, plan, ledger, pool, running)

                if not running:
                    if pending:
                        raise KapplyError(f"Plan stalled with unresolved blockers: {[r.name for r in pending]}")
                    break

                done, _ = wait(list(running), return_when=FIRST_COMPLETED)
                for future in done:
                    running.pop(future)
                    ledger.record(future.result())

    def _release_ready(
        self,
        pending: List[ResourceSpec],
        plan: ApplyPlan,
        ledger: OutcomeLedger,
        pool: ThreadPoolExecutor,
        running: Dict[Future, ResourceSpec]
    ) -> List[ResourceSpec]:
        """Submit or skip every pending resource whose blockers are settled; return the rest."""
        progressed = True
        while progressed:
            progressed = False
            waiting = []
            for resource in pending:
                if not all(name in ledger for name in plan.blockers.get(resource.name, [])):
                    waiting.append(resource)
                    continue

                progressed = True
                blocker = self._failed_blocker(resource, plan, ledger)
                if blocker is not None:
                    ledger.record(_skipped(resource, SkipReason.BLOCKING_DEPENDENCY, blocker))
                else:
                    running[pool.submit(self._execute, resource, plan.direction)] = resource
            pending = waiting
        return pending

    def _failed_blocker(self, resource: ResourceSpec, plan: ApplyPlan, ledger: OutcomeLedger) -> Optional[str]:
        """Name of the failed resource that blocks this one, if any."""
        for name in plan.blockers.get(resource.name, []):
            outcome = ledger.get(name)
            if outcome is None or not outcome.succeeded:
                return outcome.blocked_by if outcome and outcome.blocked_by else name
        return None

    def _execute(self, resource: ResourceSpec, direction: PlanDirection) -> ReconciliationOutcome:
        """Reconcile one resource; API failures become a Failed outcome."""
        try:
            if direction == PlanDirection.DESTROY:
                outcome = self._destroy_one(resource)
            else:
                outcome = self._apply_one(resource)
        except ClusterAPIError as e:
            logger.error(f"{resource}: failed: {e}")
            return ReconciliationOutcome(
                name=resource.name,
                kind=resource.kind.value,
                status=OutcomeStatus.FAILED,
                reason=str(e),
                attempts=getattr(e, "attempts", 0),
            )

        logger.info(f"{resource}: {outcome.describe()}")
        return outcome

    def _apply_one(self, resource: ResourceSpec) -> ReconciliationOutcome:
        observed = self._call(lambda: self.cluster.get(resource.kind, resource.name), f"get {resource}")[0]
        drift = diff_resource(resource, observed)

        if drift.action is None:
            return ReconciliationOutcome(name=resource.name, kind=resource.kind.value, status=OutcomeStatus.UNCHANGED)

        body = resource.desired_body()
        if drift.action == ChangeAction.CREATE:
            _, attempts = self._call(lambda: self.cluster.create(resource.kind, resource.name, body), f"create {resource}")
        else:
            logger.debug(f"{resource}: drift in {', '.join(drift.changed_fields)}")
            _, attempts = self._call(lambda: self.cluster.update(resource.kind, resource.name, body), f"update {resource}")

        return ReconciliationOutcome(
            name=resource.name,
            kind=resource.kind.value,
            status=OutcomeStatus.APPLIED,
            action=drift.action,
            changed_fields=drift.changed_fields,
            attempts=attempts,
        )

    def _destroy_one(self, resource: ResourceSpec) -> ReconciliationOutcome:
        observed = self._call(lambda: self.cluster.get(resource.kind, resource.name), f"get {resource}")[0]
        if observed is None:
            return ReconciliationOutcome(name=resource.name, kind=resource.kind.value, status=OutcomeStatus.UNCHANGED)

        _, attempts = self._call(lambda: self.cluster.delete(resource.kind, resource.name), f"delete {resource}")
        return ReconciliationOutcome(
            name=resource.name,
            kind=resource.kind.value,
            status=OutcomeStatus.APPLIED,
            action=ChangeAction.DELETE,
            attempts=attempts,
        )

    def _call(self, func, description: str):
        return call_with_retry(func, self.settings.retry, description, sleep=self._sleep)


def _skipped(resource: ResourceSpec, reason: SkipReason, blocked_by: Optional[str] = None) -> ReconciliationOutcome:
    if reason == SkipReason.BLOCKING_DEPENDENCY:
        logger.warning(f"{resource}: skipped, blocked by '{blocked_by}'")
    return ReconciliationOutcome(
        name=resource.name,
        kind=resource.kind.value,
        status=OutcomeStatus.SKIPPED,
        skip_reason=reason,
        blocked_by=blocked_by,
    )
