"""
Kubernetes module exports for the API client and exception classes.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from nodedrain.k8s.client import KubernetesClient
from nodedrain.k8s.exception import KubernetesException

__all__ = ["KubernetesClient", "KubernetesException"]
