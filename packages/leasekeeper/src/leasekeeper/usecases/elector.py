"""Elector use case: lease-based leader election for one candidate.

Each candidate runs its own Elector against the same lease key. Electors
share nothing but the lease store; at most one of them holds the lease at a
time because every write is conditional on the record the elector just read.
"""

from __future__ import annotations

import logging
import random
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from leasekeeper.adapters.metrics_port import NoOpMetricsAdapter
from leasekeeper.adapters.ports import LeaseStorePort, SystemClock
from leasekeeper.domain.events import ElectionEvent, ElectionEventType
from leasekeeper.domain.exceptions import (
    ElectorStateError,
    LeaseAlreadyExistsError,
    LeaseConfigError,
    LeaseNotFoundError,
)
from leasekeeper.domain.lease import Lease, truncate_to_millis
from leasekeeper.domain.retry import RetryPolicy
from leasekeeper.domain.settings import ElectorSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from leasekeeper.adapters.metrics_port import MetricsPort
    from leasekeeper.adapters.ports import ClockPort, EventEmitterPort

logger = logging.getLogger(__name__)


class ElectorState(Enum):
    """Enumeration of elector states.

    Attributes:
        FOLLOWER: Not leading; watching the lease.
        CANDIDATE: Attempting to create or claim the lease.
        LEADER: Holds the lease and renews it every poll.
        STOPPED: Terminal; the loop has exited.
    """

    FOLLOWER = "follower"
    CANDIDATE = "candidate"
    LEADER = "leader"
    STOPPED = "stopped"


class Elector:
    """Acquires, renews and releases a lease on behalf of one candidate.

    Every tick reads the lease fresh from the store and decides from that
    read alone:

        - absent                  -> create it, holder = self
        - held by self            -> renew it (renew_time = now)
        - released or expired     -> claim it, holder = self
        - held by another, valid  -> follow

    Renewals and claims pass the record they were derived from as the
    expected state, so two candidates racing for the same lease cannot both
    succeed. Losing a race, failing to renew, or any store error leaves the
    elector a FOLLOWER for this tick; it tries again on the next one.

    Lifecycle:
        done = elector.run()      # starts a daemon thread, returns done event
        elector.is_leader()       # safe from any thread
        elector.cancel()          # cooperative; done is set once stopped

    Thread safety:
        State is guarded by an internal lock and may be read from any thread.
        tick() must not be called directly while run() is active.
    """

    def __init__(
        self,
        settings: ElectorSettings,
        store: LeaseStorePort,
        *,
        clock: ClockPort | None = None,
        event_emitter: EventEmitterPort | None = None,
        metrics: MetricsPort | None = None,
        retry_policy: RetryPolicy | None = None,
        random_source: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the elector in FOLLOWER state.

        Args:
            settings: Election settings for this candidate.
            store: Lease store shared with the other candidates.
            clock: Wall-clock source. Defaults to SystemClock.
            event_emitter: Optional observer of election events.
            metrics: Optional metrics port. Defaults to no-op.
            retry_policy: Poll delay and failure classification policy.
            random_source: Source of samples in [0, 1) for jitter.

        Raises:
            LeaseConfigError: If settings or store are missing or invalid.
        """
        if not isinstance(settings, ElectorSettings):
            raise LeaseConfigError("settings must be an ElectorSettings instance")

        if store is None or not isinstance(store, LeaseStorePort):
            raise LeaseConfigError("store must implement LeaseStorePort")

        self._settings = settings
        self._store = store
        self._clock = clock or SystemClock()
        self._events = event_emitter
        self._metrics = metrics or NoOpMetricsAdapter()
        self._retry_policy = retry_policy or RetryPolicy()
        self._random = random_source or random.random

        self._lock = threading.Lock()
        self._state = ElectorState.FOLLOWER
        self._leader_deadline: datetime | None = None
        self._observed_lease: Lease | None = None

        self._stop = threading.Event()
        self._done = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def candidate_id(self) -> str:
        """Identity this elector records as lease holder."""
        return self._settings.candidate_id

    @property
    def settings(self) -> ElectorSettings:
        """Election settings."""
        return self._settings

    @property
    def state(self) -> ElectorState:
        """Current state."""
        with self._lock:
            return self._state

    @property
    def observed_lease(self) -> Lease | None:
        """Lease record as of the last successful read or write."""
        with self._lock:
            return self._observed_lease

    @property
    def leader_identity(self) -> str:
        """Holder recorded in the last observed lease, empty if none."""
        with self._lock:
            lease = self._observed_lease
        return lease.holder_identity if lease is not None else ""

    @property
    def done(self) -> threading.Event:
        """One-shot event set once the election loop has stopped."""
        return self._done

    def is_leader(self) -> bool:
        """Check if this candidate currently acts as leader.

        True only in LEADER state and before the local leadership deadline,
        i.e. within lease_duration of the last successful acquire or renew.
        A loop stuck in a slow store call therefore stops claiming leadership
        locally by the time other candidates may take the lease over.
        """
        with self._lock:
            if self._state != ElectorState.LEADER or self._leader_deadline is None:
                return False
            deadline = self._leader_deadline
        return self._clock.now() < deadline

    def run(self, stop_event: threading.Event | None = None) -> threading.Event:
        """Start the election loop in a daemon thread.

        Args:
            stop_event: Optional cancellation token. Setting it has the same
                       effect as calling cancel().

        Returns:
            The done event, set once the loop has stopped (and released the
            lease, if configured to).

        Raises:
            ElectorStateError: If run() was already called.
        """
        with self._lock:
            if self._thread is not None:
                raise ElectorStateError(
                    f"elector for candidate {self.candidate_id!r} was already started"
                )
            if stop_event is not None:
                self._stop = stop_event
            self._thread = threading.Thread(
                target=self._run_loop,
                name=f"elector-{self.candidate_id}",
                daemon=True,
            )
        self._thread.start()
        return self._done

    def cancel(self) -> None:
        """Request the election loop to stop.

        Returns immediately. The in-flight store call (if any) completes,
        then the lease is released if release_on_cancel is set, then the
        done event fires.
        """
        self._stop.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the loop has stopped.

        Returns:
            True if the loop stopped within timeout, False otherwise.
        """
        return self._done.wait(timeout)

    def tick(self) -> ElectorState:
        """Run one election step against a fresh read of the lease.

        Returns:
            State after the step.
        """
        if self.state == ElectorState.STOPPED:
            return ElectorState.STOPPED

        now = self._now()
        try:
            lease: Lease | None = self._store.get_lease()
        except LeaseNotFoundError:
            lease = None
        except Exception as e:
            self._on_store_failure("get", e)
            return self.state

        self._observe(lease)

        if lease is not None and lease.is_held_by(self.candidate_id):
            return self._try_renew(lease, now)

        if self.state == ElectorState.LEADER:
            holder = lease.holder_identity if lease is not None else ""
            self._become_follower(f"lease now held by {holder or 'nobody'}")

        if lease is None:
            return self._try_create(now)

        if not lease.is_held() or lease.is_expired(now):
            return self._try_claim(lease, now)

        self._become_follower(f"lease held by {lease.holder_identity}")
        return ElectorState.FOLLOWER

    def _try_create(self, now: datetime) -> ElectorState:
        """Create the absent lease with this candidate as holder."""
        self._set_state(ElectorState.CANDIDATE)
        lease = Lease.initial(self.candidate_id, now, self._settings.lease_duration)
        try:
            self._store.create_lease(lease)
        except LeaseAlreadyExistsError:
            logger.debug(f"Candidate {self.candidate_id} lost the lease creation race")
            self._become_follower("lease created by another candidate")
            return ElectorState.FOLLOWER
        except Exception as e:
            self._on_store_failure("create", e)
            return self.state

        self._become_leader(lease, now)
        return ElectorState.LEADER

    def _try_renew(self, lease: Lease, now: datetime) -> ElectorState:
        """Extend this candidate's own lease."""
        renewed = lease.renewed(now, self._settings.lease_duration)
        try:
            self._store.update_lease(renewed, expected=lease)
        except LeaseNotFoundError:
            self._emit(
                ElectionEventType.RENEWAL_FAILED,
                lease.holder_identity,
                "lease changed before renewal",
            )
            self._become_follower("lease changed before renewal")
            return ElectorState.FOLLOWER
        except Exception as e:
            self._on_store_failure("update", e)
            return self.state

        self._become_leader(renewed, now)
        return ElectorState.LEADER

    def _try_claim(self, lease: Lease, now: datetime) -> ElectorState:
        """Take over a released or expired lease."""
        self._set_state(ElectorState.CANDIDATE)
        claimed = lease.acquired_by(
            self.candidate_id, now, self._settings.lease_duration
        )
        try:
            self._store.update_lease(claimed, expected=lease)
        except LeaseNotFoundError:
            logger.debug(f"Candidate {self.candidate_id} lost the lease claim race")
            self._become_follower("lease claimed by another candidate")
            return ElectorState.FOLLOWER
        except Exception as e:
            self._on_store_failure("update", e)
            return self.state

        self._become_leader(claimed, now)
        return ElectorState.LEADER

    def _set_state(self, state: ElectorState) -> None:
        with self._lock:
            self._state = state

    def _observe(self, lease: Lease | None) -> None:
        """Record a freshly read lease and report holder changes."""
        holder = lease.holder_identity if lease is not None else ""
        with self._lock:
            previous = self._observed_lease
            self._observed_lease = lease

        if lease is not None:
            self._metrics.set_leader_transitions(lease.leader_transitions)

        previous_holder = previous.holder_identity if previous is not None else ""
        if holder and holder != previous_holder and holder != self.candidate_id:
            logger.info(f"Candidate {self.candidate_id} observed new leader {holder}")
            self._emit(ElectionEventType.NEW_LEADER_OBSERVED, holder)

    def _become_leader(self, lease: Lease, now: datetime) -> None:
        """Enter LEADER until now + the configured lease_duration unless renewed again."""
        with self._lock:
            was_leader = self._state == ElectorState.LEADER
            self._state = ElectorState.LEADER
            self._leader_deadline = now + timedelta(
                seconds=self._settings.lease_duration
            )
            self._observed_lease = lease

        self._metrics.set_leader(True)
        self._metrics.set_leader_transitions(lease.leader_transitions)

        if was_leader:
            logger.debug(f"Candidate {self.candidate_id} renewed lease")
        else:
            logger.info(
                f"Candidate {self.candidate_id} acquired lease "
                f"(leader_transitions={lease.leader_transitions})"
            )
            self._emit(ElectionEventType.STARTED_LEADING, self.candidate_id)

    def _become_follower(self, reason: str) -> None:
        """Enter FOLLOWER, reporting lost leadership if this was the leader."""
        with self._lock:
            was_leader = self._state == ElectorState.LEADER
            self._state = ElectorState.FOLLOWER
            self._leader_deadline = None

        self._metrics.set_leader(False)

        if was_leader:
            logger.warning(f"Candidate {self.candidate_id} lost leadership: {reason}")
            self._emit(ElectionEventType.STOPPED_LEADING, self.leader_identity, reason)

    def _on_store_failure(self, operation: str, error: Exception) -> None:
        """Treat a failed store call as "could not confirm leadership"."""
        self._metrics.record_store_error(operation)

        if self._retry_policy.is_transient_error(error):
            logger.warning(
                f"Candidate {self.candidate_id}: lease store {operation} failed "
                f"(transient), retrying next tick: {error}"
            )
        else:
            logger.error(
                f"Candidate {self.candidate_id}: lease store {operation} failed: {error}",
                exc_info=error,
            )

        if self.state == ElectorState.LEADER:
            self._emit(
                ElectionEventType.RENEWAL_FAILED,
                self.candidate_id,
                f"store {operation} failed: {error}",
            )
        self._become_follower(f"could not confirm leadership: {error}")

    def _now(self) -> datetime:
        # Records carry millisecond times so the local deadline matches what
        # other candidates read back from the store.
        return truncate_to_millis(self._clock.now())

    def _next_delay(self) -> float:
        return self._retry_policy.calculate_delay(
            self._settings.retry_period,
            self._settings.lease_duration,
            self._random(),
        )

    def _run_loop(self) -> None:
        logger.info(f"Candidate {self.candidate_id} joined election")
        try:
            while not self._stop.is_set():
                try:
                    self.tick()
                except Exception:
                    logger.exception(
                        f"Election tick failed for candidate {self.candidate_id}"
                    )
                    self._become_follower("election tick failed")

                if self._stop.wait(self._next_delay()):
                    break
        finally:
            try:
                self._shutdown()
            finally:
                self._done.set()

    def _shutdown(self) -> None:
        """Enter STOPPED, then release the lease if configured.

        Leadership is given up locally before the release is written, so no
        other candidate can acquire the lease while this one still reports
        is_leader().
        """
        with self._lock:
            was_leader = self._state == ElectorState.LEADER
            self._state = ElectorState.STOPPED
            self._leader_deadline = None

        self._metrics.set_leader(False)

        if was_leader:
            self._emit(
                ElectionEventType.STOPPED_LEADING, self.candidate_id, "elector stopped"
            )
            if self._settings.release_on_cancel:
                self._release()

        logger.info(f"Candidate {self.candidate_id} left election")

    def _release(self) -> bool:
        """Best-effort clear of the holder so the next candidate need not wait.

        Reads the lease first and only clears it if this candidate still
        holds it. Failures are logged; the lease then expires on its own.
        """
        now = self._now()
        try:
            lease = self._store.get_lease()
        except Exception as e:
            logger.warning(
                f"Candidate {self.candidate_id} could not read lease for release: {e}"
            )
            return False

        if not lease.is_held_by(self.candidate_id):
            logger.info(
                f"Candidate {self.candidate_id} not releasing lease held by "
                f"{lease.holder_identity or 'nobody'}"
            )
            return False

        try:
            self._store.update_lease(lease.released(now), expected=lease)
        except LeaseNotFoundError:
            logger.info(
                f"Candidate {self.candidate_id} lease changed before release"
            )
            return False
        except Exception as e:
            self._metrics.record_store_error("update")
            logger.warning(
                f"Candidate {self.candidate_id} failed to release lease, "
                f"it will expire after {lease.lease_duration}s: {e}"
            )
            return False

        logger.info(f"Candidate {self.candidate_id} released lease")
        self._emit(ElectionEventType.LEASE_RELEASED, "", "released on cancel")
        return True

    def _emit(
        self, event_type: ElectionEventType, holder_identity: str, reason: str | None = None
    ) -> None:
        if self._events is None:
            return
        self._events.emit(
            ElectionEvent(
                event_type=event_type,
                candidate_id=self.candidate_id,
                holder_identity=holder_identity,
                reason=reason,
            )
        )
