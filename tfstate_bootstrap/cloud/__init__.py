"""Remote cloud API boundary.

Modules
-------
base
    The ``CloudAPI`` protocol, request models and the remote error hierarchy.
yandex
    ``YandexCloudClient`` — httpx-based implementation over the Yandex Cloud
    REST endpoints.
"""

from tfstate_bootstrap.cloud.base import (
    AccessBindingDelta,
    CloudAPI,
    CloudAPIError,
    CloudTimeoutError,
    CloudTransportError,
    OperationFailedError,
)
from tfstate_bootstrap.cloud.yandex import YandexCloudClient

__all__ = [
    "AccessBindingDelta",
    "CloudAPI",
    "CloudAPIError",
    "CloudTimeoutError",
    "CloudTransportError",
    "OperationFailedError",
    "YandexCloudClient",
]
