"""
Kubernetes API client wrapper with error handling and node drain operations.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging

from kubernetes import client as k8s
from kubernetes import config as k8s_config
from kubernetes.client import ApiException

from nodedrain.k8s.exception import KubernetesException, handle_k8s_api_exception
from nodedrain.settings import TEST_KUBE_CONTEXT_NAME

logger = logging.getLogger(__name__)


class KubernetesClient:
    """Wrapper for Kubernetes API operations."""

    def __init__(self) -> None:
        """Initialize Kubernetes client."""
        try:
            k8s_config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
        except k8s_config.ConfigException:
            try:
                k8s_config.load_kube_config()
                logger.info("Loaded local Kubernetes config")
                # Verify we are using the expected kube-context for testing
                _, current_context = k8s_config.list_kube_config_contexts()
                if current_context["name"] != TEST_KUBE_CONTEXT_NAME:
                    raise KubernetesException(
                        f"Unexpected kube-context '{current_context['name']}' name"
                    )
            except k8s_config.ConfigException as e:
                raise KubernetesException(
                    f"Failed to load Kubernetes config: {e}. Ensure you have a valid "
                    f"kubeconfig file or are running in a Kubernetes cluster"
                ) from e
            except KubernetesException:
                raise
            except Exception as e:
                raise KubernetesException(f"Unexpected error loading kube config: {e}") from e

        self.v1: k8s.CoreV1Api = k8s.CoreV1Api()
        logger.info("Kubernetes client initialized")

    @handle_k8s_api_exception
    def patch_node_schedulable(self, node_name: str, unschedulable: bool) -> None:
        """Set the schedulability flag of a node, leaving the rest of the node untouched.

        :param node_name: Name of the node
        :param unschedulable: True to cordon the node, False to uncordon it
        """
        patch_body = {"spec": {"unschedulable": unschedulable}}
        self.v1.patch_node(name=node_name, body=patch_body)
        logger.info(f"Patched node {node_name} with unschedulable={unschedulable}")

    def cordon_node(self, node_name: str) -> None:
        """Mark a node as unschedulable.

        :param node_name: Name of the node
        """
        self.patch_node_schedulable(node_name, True)

    def uncordon_node(self, node_name: str) -> None:
        """Mark a node as schedulable.

        :param node_name: Name of the node
        """
        self.patch_node_schedulable(node_name, False)

    @handle_k8s_api_exception
    def list_pods_on_node(self, node_name: str) -> list[k8s.V1Pod]:
        """List all pods assigned to a specific node, across all namespaces.

        :param node_name: Name of the node
        :return: List of pods running on the node
        """
        pods: k8s.V1PodList = self.v1.list_pod_for_all_namespaces(
            field_selector=f"spec.nodeName={node_name}"
        )
        logger.info(f"Found {len(pods.items)} pods on node {node_name}")
        return pods.items

    @handle_k8s_api_exception
    def evict_pod(
        self,
        namespace: str,
        name: str,
        grace_period_seconds: int | None = None,
        request_timeout: float | None = None,
    ) -> None:
        """Request the eviction of a pod through the policy/v1 Eviction API.

        The API server refuses the eviction with HTTP 429 when it would violate a
        PodDisruptionBudget.

        :param namespace: Namespace of the pod
        :param name: Name of the pod
        :param grace_period_seconds: Termination grace period, None for the pod default
        :param request_timeout: Client side timeout for the HTTP request, in seconds
        """
        delete_options = None
        if grace_period_seconds is not None:
            delete_options = k8s.V1DeleteOptions(grace_period_seconds=grace_period_seconds)
        eviction = k8s.V1Eviction(
            metadata=k8s.V1ObjectMeta(name=name, namespace=namespace),
            delete_options=delete_options,
        )
        self.v1.create_namespaced_pod_eviction(
            name=name, namespace=namespace, body=eviction, _request_timeout=request_timeout
        )
        logger.debug(f"Eviction of pod {namespace}/{name} accepted")

    @handle_k8s_api_exception
    def get_pod(
        self, namespace: str, name: str, request_timeout: float | None = None
    ) -> k8s.V1Pod | None:
        """Read a pod.

        :param namespace: Namespace of the pod
        :param name: Name of the pod
        :param request_timeout: Client side timeout for the HTTP request, in seconds
        :return: The pod, or None if it does not exist
        """
        try:
            return self.v1.read_namespaced_pod(
                name=name, namespace=namespace, _request_timeout=request_timeout
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise e

    @handle_k8s_api_exception
    def delete_pod(
        self,
        namespace: str,
        name: str,
        grace_period_seconds: int | None = None,
        request_timeout: float | None = None,
    ) -> None:
        """Delete a pod directly, bypassing PodDisruptionBudgets.

        :param namespace: Namespace of the pod
        :param name: Name of the pod
        :param grace_period_seconds: Termination grace period, None for the pod default
        :param request_timeout: Client side timeout for the HTTP request, in seconds
        """
        try:
            self.v1.delete_namespaced_pod(
                name=name,
                namespace=namespace,
                grace_period_seconds=grace_period_seconds,
                _request_timeout=request_timeout,
            )
            logger.info(f"Deleted pod {namespace}/{name}")
        except ApiException as e:
            if e.status == 404:
                logger.info(f"Pod {namespace}/{name} already deleted")
            else:
                raise e
