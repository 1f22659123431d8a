"""
Kubernetes access utilities for the Policy Recommendation Orchestrator

Resolves cluster credentials, creates API clients and inspects the pods and
secrets the orchestrator depends on.
"""

import base64
import os
from pathlib import Path
from typing import Optional, Tuple

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from ..core.exceptions import ConfigurationError, RetrievalPreconditionError
from .logger import get_logger


logger = get_logger(__name__)

DEFAULT_KUBECONFIG = Path("~/.kube/config")

# Raised by the API client when the control plane cannot be reached
TRANSPORT_ERRORS = (Urllib3HTTPError, OSError)


def resolve_kubeconfig(kubeconfig: Optional[str] = None) -> Optional[str]:
    """
    Resolve the kubeconfig file to use.

    Order: explicit path, ``$KUBECONFIG``, ``~/.kube/config``. Returns None when
    none exists, in which case in-cluster configuration is used.
    """
    if kubeconfig:
        path = Path(kubeconfig).expanduser()
        if not path.is_file():
            raise ConfigurationError("kubeconfig", f"kubeconfig file {kubeconfig} does not exist")
        return str(path)

    env_path = os.environ.get("KUBECONFIG")
    if env_path:
        # Only the first entry of a path list is used
        first = env_path.split(os.pathsep)[0]
        if first:
            return str(Path(first).expanduser())

    default = DEFAULT_KUBECONFIG.expanduser()
    if default.is_file():
        return str(default)
    return None


def create_api_client(kubeconfig: Optional[str]) -> client.ApiClient:
    """
    Create a Kubernetes API client.

    Args:
        kubeconfig: Resolved kubeconfig path, or None for in-cluster configuration

    Raises:
        ConfigurationError: If no usable configuration is found
    """
    try:
        if kubeconfig:
            return config.new_client_from_config(config_file=kubeconfig)
        configuration = client.Configuration()
        config.load_incluster_config(client_configuration=configuration)
        return client.ApiClient(configuration)
    except (ConfigException, OSError) as e:
        raise ConfigurationError(
            "kubeconfig", f"couldn't create k8s client using given kubeconfig, {e}"
        )


def find_running_pod(core_api: client.CoreV1Api, namespace: str, label_selector: str) -> Optional[str]:
    """
    Find a Running pod matching a label selector.

    Returns:
        The pod name, or None when no matching pod is Running
    """
    pods = core_api.list_namespaced_pod(namespace, label_selector=label_selector)
    for pod in pods.items:
        if pod.status is not None and pod.status.phase == "Running":
            return pod.metadata.name
    return None


def require_running_pod(
    core_api: client.CoreV1Api,
    namespace: str,
    label_selector: str,
    component: str,
) -> str:
    """
    Find a Running pod for a component or fail with a precondition error.

    Raises:
        RetrievalPreconditionError: If the pod listing fails or no pod is Running
    """
    try:
        pod_name = find_running_pod(core_api, namespace, label_selector)
    except ApiException as e:
        raise RetrievalPreconditionError(
            f"error when finding the {component} Pod, please check the deployment of {component}: {e.reason}",
            component=component,
        )
    except TRANSPORT_ERRORS as e:
        raise RetrievalPreconditionError(
            f"error when finding the {component} Pod, control plane unreachable: {e}",
            component=component,
        )
    if pod_name is None:
        raise RetrievalPreconditionError(
            f"can't find the {component} Pod in namespace {namespace}, "
            f"please check the deployment of {component}",
            component=component,
        )
    logger.debug(f"Found running {component} Pod {pod_name}")
    return pod_name


def read_secret_credentials(core_api: client.CoreV1Api, namespace: str, secret_name: str) -> Tuple[str, str]:
    """
    Read the username and password keys of a secret.

    Raises:
        RetrievalPreconditionError: If the secret cannot be read or lacks a key
    """
    try:
        secret = core_api.read_namespaced_secret(secret_name, namespace)
    except ApiException as e:
        raise RetrievalPreconditionError(
            f"error when getting secret {secret_name} in namespace {namespace}: {e.reason}",
            component=secret_name,
        )
    except TRANSPORT_ERRORS as e:
        raise RetrievalPreconditionError(
            f"error when getting secret {secret_name} in namespace {namespace}, control plane unreachable: {e}",
            component=secret_name,
        )

    data = secret.data or {}
    values = []
    for key in ("username", "password"):
        if key not in data:
            raise RetrievalPreconditionError(
                f"secret {secret_name} has no {key} key", component=secret_name
            )
        values.append(base64.b64decode(data[key]).decode("utf-8"))
    return values[0], values[1]
