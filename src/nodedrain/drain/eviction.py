"""
PodDisruptionBudget aware pod eviction with exponential backoff.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from datetime import timedelta

from kubernetes import client as k8s
from tenacity import RetryCallState, RetryError, Retrying, retry_if_exception, wait_exponential

from nodedrain.drain.deadline import Deadline
from nodedrain.drain.exception import EvictionTimeoutException
from nodedrain.k8s import KubernetesClient, KubernetesException

logger = logging.getLogger(__name__)

POLL_INTERVAL = timedelta(milliseconds=500)
FALLBACK_BACKOFF = timedelta(seconds=1)
FALLBACK_MAX_BACKOFF = timedelta(seconds=10)


def backoff_wait(initial: timedelta, maximum: timedelta) -> wait_exponential:
    """Build the retry wait strategy, doubling from initial up to maximum.

    :param initial: First delay, non-positive values fall back to 1s
    :param maximum: Delay ceiling, non-positive values fall back to 10s
    :return: Exponential wait strategy
    """
    if initial <= timedelta():
        initial = FALLBACK_BACKOFF
    if maximum <= timedelta():
        maximum = FALLBACK_MAX_BACKOFF
    return wait_exponential(multiplier=initial.total_seconds(), max=maximum.total_seconds())


def is_retriable(e: BaseException) -> bool:
    """Check if an eviction error is a disruption budget refusal or a transient API error.

    :param e: Error raised by an eviction attempt
    :return: True if the eviction should be retried
    """
    return isinstance(e, KubernetesException) and (e.is_too_many_requests or e.is_transient)


class EvictionEngine:
    """Drives the eviction of a single pod until it is gone or the deadline expires."""

    def __init__(
        self, k8s_client: KubernetesClient, poll_interval: timedelta = POLL_INTERVAL
    ) -> None:
        """Initialize eviction engine.

        :param k8s_client: Kubernetes client used to evict and poll pods
        :param poll_interval: Interval between checks for pod disappearance
        """
        self.k8s_client = k8s_client
        self.poll_interval = poll_interval

    def evict(
        self,
        pod: k8s.V1Pod,
        deadline: Deadline,
        grace_period_seconds: int | None = None,
        backoff_initial: timedelta = FALLBACK_BACKOFF,
        backoff_max: timedelta = FALLBACK_MAX_BACKOFF,
    ) -> None:
        """Evict a pod and wait for it to disappear.

        Evictions refused because of a disruption budget (429) or a transient API
        error are retried with exponential backoff for as long as the deadline allows.

        :param pod: Pod to evict
        :param deadline: Shared drain deadline
        :param grace_period_seconds: Termination grace period, None for the pod default
        :param backoff_initial: First retry delay
        :param backoff_max: Retry delay ceiling
        :raises EvictionTimeoutException: If the deadline expires first
        :raises KubernetesException: On any non retriable API error
        """
        namespace, name = pod.metadata.namespace, pod.metadata.name
        context = {"pod": f"{namespace}/{name}"}
        poll_seconds = self.poll_interval.total_seconds()
        attempts = 0

        def submit_eviction() -> bool:
            nonlocal attempts
            if deadline.expired():
                raise EvictionTimeoutException(
                    f"Timed out evicting pod {namespace}/{name} after {attempts} attempt(s)"
                )
            attempts += 1
            try:
                self.k8s_client.evict_pod(
                    namespace,
                    name,
                    grace_period_seconds=grace_period_seconds,
                    request_timeout=max(deadline.remaining(), poll_seconds),
                )
            except KubernetesException as e:
                if e.is_not_found:
                    logger.info(f"Pod {namespace}/{name} already gone", extra=context)
                    return False
                raise
            return True

        def log_retry(retry_state: RetryCallState) -> None:
            e = retry_state.outcome.exception()
            logger.info(
                f"Eviction of pod {namespace}/{name} refused ({e.reason or e.status}), "
                f"retrying in {retry_state.next_action.sleep:g}s",
                extra=context,
            )

        retrying = Retrying(
            retry=retry_if_exception(is_retriable),
            wait=backoff_wait(backoff_initial, backoff_max),
            stop=lambda retry_state: deadline.expired(),
            sleep=deadline.sleep,
            before_sleep=log_retry,
        )
        try:
            accepted = retrying(submit_eviction)
        except RetryError as e:
            raise EvictionTimeoutException(
                f"Timed out evicting pod {namespace}/{name} after {attempts} attempt(s)"
            ) from e.last_attempt.exception()

        if accepted:
            logger.info(f"Eviction of pod {namespace}/{name} accepted", extra=context)
            self._wait_for_deletion(pod, deadline)

    def _wait_for_deletion(self, pod: k8s.V1Pod, deadline: Deadline) -> None:
        """Poll until the pod no longer exists or was replaced by a pod with another UID.

        :param pod: Evicted pod
        :param deadline: Shared drain deadline
        :raises EvictionTimeoutException: If the deadline expires first
        """
        namespace, name = pod.metadata.namespace, pod.metadata.name
        context = {"pod": f"{namespace}/{name}"}
        poll_seconds = self.poll_interval.total_seconds()
        while True:
            try:
                current = self.k8s_client.get_pod(
                    namespace, name, request_timeout=max(deadline.remaining(), poll_seconds)
                )
            except KubernetesException as e:
                logger.warning(f"Failed to check pod {namespace}/{name}: {e}", extra=context)
            else:
                if current is None or current.metadata.uid != pod.metadata.uid:
                    logger.info(f"Pod {namespace}/{name} deleted", extra=context)
                    return
            if not deadline.sleep(poll_seconds):
                raise EvictionTimeoutException(
                    f"Timed out waiting for pod {namespace}/{name} to be deleted"
                )
