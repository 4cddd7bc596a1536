"""
NodeDrainer orchestration class for cordoning and draining nodes.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
import threading

from kubernetes import client as k8s

from nodedrain.drain.classifier import Classification, classify_pod
from nodedrain.drain.deadline import Deadline
from nodedrain.drain.eviction import POLL_INTERVAL, EvictionEngine
from nodedrain.drain.exception import (
    DrainException,
    EvictionTimeoutException,
    InvalidDrainRequestException,
)
from nodedrain.drain.models import DrainReport, DrainRequest, PodAction, PodOutcome
from nodedrain.k8s import KubernetesClient, KubernetesException
from nodedrain.notification import send_notification
from nodedrain.settings import CLUSTER_NAME

logger = logging.getLogger(__name__)


class NodeDrainer:
    """Cordons a node and evicts its pods."""

    def __init__(
        self,
        k8s_client: KubernetesClient = None,
        eviction_engine: EvictionEngine = None,
        cluster_name: str = None,
    ) -> None:
        """Initialize NodeDrainer.

        :param k8s_client: Kubernetes client, a new one is created if not provided
        :param eviction_engine: Eviction engine, one using k8s_client is created if not provided
        :param cluster_name: Name of the cluster for notifications
        """
        self.k8s_client = KubernetesClient() if k8s_client is None else k8s_client
        self.eviction_engine = (
            EvictionEngine(self.k8s_client) if eviction_engine is None else eviction_engine
        )
        self.cluster_name = CLUSTER_NAME if cluster_name is None else cluster_name
        logger.info(f"NodeDrainer initialized for cluster {self.cluster_name}")

    def cordon(self, node_name: str) -> None:
        """Mark a node as unschedulable.

        :param node_name: Name of the node
        """
        self._validate_node_name(node_name)
        self.k8s_client.cordon_node(node_name)
        logger.info(f"Node {node_name} cordoned", extra={"node": node_name})

    def uncordon(self, node_name: str) -> None:
        """Mark a node as schedulable again.

        :param node_name: Name of the node
        """
        self._validate_node_name(node_name)
        self.k8s_client.uncordon_node(node_name)
        logger.info(f"Node {node_name} uncordoned", extra={"node": node_name})

    def run(self, request: DrainRequest, cancel_event: threading.Event = None) -> DrainReport:
        """Drain a node and send a notification with the outcome.

        :param request: Drain request
        :param cancel_event: Event that cancels the drain when set
        :return: Drain report
        """
        logger.info("Starting NodeDrainer run...")
        try:
            report = self.drain(request, cancel_event=cancel_event)
        except (DrainException, KubernetesException) as e:
            send_notification(self._format_failure_message(request, e))
            raise e
        send_notification(self._format_message(report))
        logger.info("Finished NodeDrainer run.")
        return report

    def drain(self, request: DrainRequest, cancel_event: threading.Event = None) -> DrainReport:
        """Cordon the node and evict every pod on it.

        Only invalid requests, cordon failures and pod listing failures are raised.
        Per-pod failures are recorded in the returned report.

        :param request: Drain request
        :param cancel_event: Event that cancels the drain when set
        :return: Drain report with one outcome per processed pod, in listing order
        """
        node_name = request.node_name
        self._validate_node_name(node_name)
        context = {"node": node_name}
        deadline = Deadline(request.timeout, cancelled=cancel_event)

        logger.info(f"Cordoning node {node_name}", extra=context)
        try:
            self.k8s_client.cordon_node(node_name)
        except KubernetesException as e:
            logger.exception(f"Failed to cordon node '{node_name}': {e}", extra=context)
            raise e

        try:
            pods = self.k8s_client.list_pods_on_node(node_name)
        except KubernetesException as e:
            logger.exception(f"Failed to list pods on node '{node_name}': {e}", extra=context)
            raise e

        results: list[PodOutcome] = []
        for pod in pods:
            outcome = self._process_pod(pod, request, deadline)
            if outcome is not None:
                results.append(outcome)

        report = DrainReport(request=request, results=tuple(results))
        logger.info(
            f"Drain of node {node_name} finished: {len(report.results)} pods processed, "
            f"{len(report.failures)} failed",
            extra=context,
        )
        return report

    def _process_pod(
        self, pod: k8s.V1Pod, request: DrainRequest, deadline: Deadline
    ) -> PodOutcome | None:
        """Classify a pod and evict it if needed.

        :param pod: Pod on the drained node
        :param request: Drain request
        :param deadline: Shared drain deadline
        :return: Outcome of the pod, None for completed pods
        """
        namespace, name = pod.metadata.namespace, pod.metadata.name
        context = {"node": request.node_name, "pod": f"{namespace}/{name}"}
        classification = classify_pod(pod, request)
        logger.debug(f"Pod {namespace}/{name} classified as {classification.value}", extra=context)

        if classification is Classification.COMPLETED:
            return None
        if classification.skip_action is not None:
            return PodOutcome(namespace, name, classification.skip_action)

        try:
            self.eviction_engine.evict(
                pod,
                deadline,
                grace_period_seconds=request.grace_period,
                backoff_initial=request.retry_backoff,
                backoff_max=request.max_backoff,
            )
        except (EvictionTimeoutException, KubernetesException) as evict_error:
            if not request.force:
                logger.warning(
                    f"Failed to evict pod {namespace}/{name}: {evict_error}", extra=context
                )
                return PodOutcome(namespace, name, PodAction.EVICT_FAILED, str(evict_error))
            return self._force_delete(pod, request, deadline, evict_error)
        return PodOutcome(namespace, name, PodAction.EVICTED)

    def _force_delete(
        self, pod: k8s.V1Pod, request: DrainRequest, deadline: Deadline, evict_error: Exception
    ) -> PodOutcome:
        """Delete a pod directly after its eviction failed.

        Nothing is deleted once the drain is cancelled. After the deadline, the delete
        request is bounded by the poll interval.

        :param pod: Pod to delete
        :param request: Drain request
        :param deadline: Shared drain deadline
        :param evict_error: Error that made the eviction fail
        :return: Outcome of the pod
        """
        namespace, name = pod.metadata.namespace, pod.metadata.name
        context = {"node": request.node_name, "pod": f"{namespace}/{name}"}
        if deadline.cancelled:
            logger.warning(
                f"Drain cancelled, not force deleting pod {namespace}/{name}", extra=context
            )
            return PodOutcome(
                namespace,
                name,
                PodAction.EVICT_AND_DELETE_FAILED,
                f"evict: {evict_error}; delete: skipped, drain cancelled",
            )

        logger.warning(
            f"Eviction of pod {namespace}/{name} failed ({evict_error}), force deleting",
            extra=context,
        )
        try:
            self.k8s_client.delete_pod(
                namespace,
                name,
                grace_period_seconds=request.grace_period,
                request_timeout=max(deadline.remaining(), POLL_INTERVAL.total_seconds()),
            )
        except KubernetesException as delete_error:
            logger.exception(f"Failed to force delete pod {namespace}/{name}", extra=context)
            return PodOutcome(
                namespace,
                name,
                PodAction.EVICT_AND_DELETE_FAILED,
                f"evict: {evict_error}; delete: {delete_error}",
            )
        return PodOutcome(namespace, name, PodAction.FORCE_DELETED)

    @staticmethod
    def _validate_node_name(node_name: str) -> None:
        if not node_name:
            raise InvalidDrainRequestException("node_name is required")

    def _format_message(self, report: DrainReport) -> str:
        """Format notification message for a finished drain.

        :param report: Drain report
        :return: Formatted message string
        """
        if report.failures:
            icon = ":warning:"
            verb = f"drained Node with {len(report.failures)} failure(s)"
        else:
            icon = ":droplet:"
            verb = "drained Node"

        lines = [
            f"{icon} NodeDrain {verb} \n",
            f"> Node: `{report.node_name}`\n",
            f"> Cluster: {self.cluster_name}\n",
            f"> Evicted: {report.count(PodAction.EVICTED)}\n",
            f"> Force deleted: {report.count(PodAction.FORCE_DELETED)}\n",
            f"> Skipped: {self._skipped_count(report)}",
        ]
        for outcome in report.failures:
            lines.append(
                f"\n> `{outcome.namespace}/{outcome.name}`: "
                f"{outcome.action.value} ({outcome.error})"
            )
        return "".join(lines)

    def _format_failure_message(self, request: DrainRequest, error: Exception) -> str:
        return (
            f":warning: NodeDrain failed to drain Node, error {error} \n"
            f"> Node: `{request.node_name}`\n"
            f"> Cluster: {self.cluster_name}"
        )

    @staticmethod
    def _skipped_count(report: DrainReport) -> int:
        return sum(
            report.count(action)
            for action in (
                PodAction.SKIPPED_MIRROR,
                PodAction.SKIPPED_DAEMONSET,
                PodAction.SKIPPED_LOCAL_DATA,
            )
        )
