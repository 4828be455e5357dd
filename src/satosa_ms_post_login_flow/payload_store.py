"""
One-time storage of handoff payloads for transports that go through the browser.

Only a random reference leaves the proxy; the post login flow exchanges it for the payload exactly once.
A reference the user made up or altered finds nothing and is rejected.
"""

import json
import logging
import secrets
import threading
from abc import ABC, abstractmethod

import redis

from .exceptions import UnknownPayloadReference

logger = logging.getLogger(__name__)

DEFAULT_PAYLOAD_TTL = 300


class PayloadStore(ABC):
    @abstractmethod
    def _put(self, reference: str, data: str):
        pass

    @abstractmethod
    def _take(self, reference: str):
        """ Return the stored data and remove it, or None """

    def put(self, payload_attributes: dict) -> str:
        reference = secrets.token_urlsafe(32)
        self._put(reference, json.dumps(payload_attributes))
        return reference

    def take(self, reference: str) -> dict:
        data = self._take(reference) if reference else None
        if data is None:
            logger.warning('Unknown or already used handoff payload reference')
            raise UnknownPayloadReference('Unknown or already used handoff payload reference')
        return json.loads(data)


class InMemoryPayloadStore(PayloadStore):
    """ Only usable when the post login flow runs inside this process; entries do not expire """
    def __init__(self):
        self._payloads = {}
        self._lock = threading.Lock()

    def _put(self, reference, data):
        with self._lock:
            self._payloads[reference] = data

    def _take(self, reference):
        with self._lock:
            return self._payloads.pop(reference, None)

    def __len__(self):
        return len(self._payloads)


class RedisPayloadStore(PayloadStore):
    def __init__(self, client, key_prefix='post_login_flow_payload:', ttl=DEFAULT_PAYLOAD_TTL):
        self.client = client
        self.key_prefix = key_prefix
        self.ttl = ttl

    def _key(self, reference):
        return f"{self.key_prefix}{reference}"

    def _put(self, reference, data):
        self.client.set(self._key(reference), data, ex=self.ttl)

    def _take(self, reference):
        pipe = self.client.pipeline(transaction=True)
        pipe.get(self._key(reference))
        pipe.delete(self._key(reference))
        value, _ = pipe.execute()
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        return value


def payload_store_from_config(config: dict, client=None) -> PayloadStore:
    store_config = config.get('signal_store', {})
    if client is None:
        client = redis.Redis(host=store_config.get('redis_host', 'localhost'),
                             port=int(store_config.get('redis_port', 6379)),
                             db=int(store_config.get('redis_db', 0)),
                             decode_responses=True)
    return RedisPayloadStore(client,
                             key_prefix=store_config.get('payload_key_prefix', 'post_login_flow_payload:'),
                             ttl=int(store_config.get('payload_ttl', DEFAULT_PAYLOAD_TTL)))
