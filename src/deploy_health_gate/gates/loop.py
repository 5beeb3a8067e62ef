# src/deploy_health_gate/gates/loop.py
# Polling loop deciding the deploy verdict.
"""
Gate loop - polls monitor states after a deploy and decides pass/fail.

The loop runs for a fixed number of iterations derived from the longest
monitor check window, plus one. Each iteration refreshes the working set,
then either:

- finds nothing alerting: monitors whose check window has elapsed are
  settled and dropped; once none are left the deploy passes, or
- finds monitors alerting: their failure behavior is applied and the deploy
  fails immediately.
"""

import logging
import math
import time
from datetime import datetime
from typing import Callable, Optional, Sequence

from deploy_health_gate.errors import ConfigurationError
from deploy_health_gate.gates.models import GateRun, GateStatus, IterationResult
from deploy_health_gate.gates.refresher import ConcurrentRefresher
from deploy_health_gate.models import Deploy, FailureBehavior, Monitor
from deploy_health_gate.output import OutputSink

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60.0


def _format_seconds(seconds: float) -> str:
    if seconds % 60 == 0:
        return f"{int(seconds // 60)} min"
    return f"{seconds:g}s"


class GateLoop:
    """Polling state machine validating a single deploy."""

    def __init__(
        self,
        refresher: ConcurrentRefresher,
        interval: float = DEFAULT_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.refresher = refresher
        self.interval = interval
        self._sleep = sleep
        self.last_run: Optional[GateRun] = None

    def max_iterations(self, monitors: Sequence[Monitor]) -> int:
        """Iterations needed to cover the longest check window, plus one."""
        longest = max((m.check_duration for m in monitors), default=0.0)
        return math.ceil(longest / self.interval) + 1

    def run(self, deploy: Deploy, output: OutputSink) -> bool:
        """
        Validate a deploy.

        Returns True when no gating monitor alerted during its check window,
        False when one did. ConfigurationError and ProviderRefreshError
        propagate to the caller.
        """
        run = GateRun(deploy_id=deploy.id, status=GateStatus.SKIPPED, started_at=datetime.now())
        self.last_run = run

        # nothing to do for the common cases, so nothing is logged either
        monitors = tuple(deploy.validation_monitors)
        if not deploy.succeeded or not monitors:
            run.finished_at = datetime.now()
            return True

        try:
            verdict = self._poll(deploy, monitors, output, run)
        except Exception as e:
            run.status = GateStatus.ERROR
            run.error = str(e)
            raise
        finally:
            run.finished_at = datetime.now()
            run.redeploy_previous = deploy.redeploy_previous_when_failed

        run.status = GateStatus.PASSED if verdict else GateStatus.FAILED
        return verdict

    def _poll(
        self,
        deploy: Deploy,
        monitors: tuple[Monitor, ...],
        output: OutputSink,
        run: GateRun,
    ) -> bool:
        groups = deploy.deploy_groups
        iterations = self.max_iterations(monitors)
        run.max_iterations = iterations
        logger.info(
            "Validating deploy %s against %d monitor(s) for up to %d iteration(s)",
            deploy.id,
            len(monitors),
            iterations,
        )

        for iteration in range(1, iterations + 1):
            elapsed = iteration * self.interval
            self.refresher.refresh_all(monitors)
            alerting = tuple(m for m in monitors if m.alerting(groups))
            result = IterationResult(
                iteration=iteration,
                elapsed_seconds=elapsed,
                polled=[m.id for m in monitors],
                alerting=[m.id for m in alerting],
            )
            run.iterations.append(result)

            if alerting:
                output.puts("Alert on monitors:\n" + "\n".join(m.reference() for m in alerting))
                self._apply_failure_behaviors(deploy, alerting, output)
                return False

            remaining = iterations - iteration
            if remaining > 0:
                output.puts(f"No monitors alerting, {_format_seconds(remaining * self.interval)} remaining")
            else:
                output.puts("No monitors alerting")

            # stop checking monitors whose window has passed
            result.settled = [m.id for m in monitors if m.check_duration <= elapsed]
            monitors = tuple(m for m in monitors if m.check_duration > elapsed)
            if not monitors:
                return True

            if remaining > 0:
                self._sleep(self.interval)

        return True

    def _apply_failure_behaviors(
        self,
        deploy: Deploy,
        alerting: Sequence[Monitor],
        output: OutputSink,
    ) -> None:
        # parse everything first so a bad entry fails before any side effect
        behaviors = [(m, FailureBehavior.parse(m.failure_behavior)) for m in alerting]
        for monitor, behavior in behaviors:
            if behavior is FailureBehavior.REDEPLOY_PREVIOUS:
                deploy.redeploy_previous_when_failed = True
                output.puts("Trying to redeploy previous succeeded deploy")
            elif behavior is FailureBehavior.FAIL_DEPLOY:
                pass
            else:
                raise ConfigurationError(
                    f"monitor {monitor.id} alerting without a failure behavior"
                )
            logger.info("Monitor %s alerting, failure behavior %s", monitor.id, behavior.value)
