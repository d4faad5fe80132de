"""HTTP clients for the storage service and the outbound webhook."""

from .storage_client import IStorageClient, StorageClient
from .webhook_client import NOTIFIER_USERNAME, IWebhookClient, WebhookClient

__all__ = [
    "IStorageClient",
    "StorageClient",
    "IWebhookClient",
    "WebhookClient",
    "NOTIFIER_USERNAME",
]
