"""Client side of the remote ISO 14912 engine.

- client: httpx-based JSON client with retry/backoff and error classification
- service: endpoint wrappers and boundary unit canonicalization
"""

from isogas.remote.client import RemoteClient, RetryPolicy, call_with_retry
from isogas.remote.service import Iso14912Service

__all__ = ["Iso14912Service", "RemoteClient", "RetryPolicy", "call_with_retry"]
