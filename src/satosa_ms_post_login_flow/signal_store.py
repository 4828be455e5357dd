"""
Completion signal store shared by the proxy and the post login flow.

The post login flow writes a signal keyed by the proxy session id when it is done,
the proxy consumes it (read and delete in one step) on the next request of that session.

InMemorySignalStore only works when both sides run in the same process.
Deployments with several gunicorn workers (or a post login flow in its own deployment) need RedisSignalStore.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

import redis

from .definitions import SIGNAL_CONTINUE
from .exceptions import UnconfiguredDependency

logger = logging.getLogger(__name__)


class SignalStore(ABC):
    @abstractmethod
    def get_and_clear(self, session_id: str) -> Optional[str]:
        """ Return the signal for session_id and remove it, or None. Only one concurrent caller sees the value. """

    @abstractmethod
    def set(self, session_id: str, signal: str):
        """ Store signal for session_id, replacing an unconsumed one """

    def signal_continue(self, session_id: str):
        self.set(session_id, SIGNAL_CONTINUE)

    def signal_failure(self, session_id: str, outcome: str):
        if not outcome or outcome == SIGNAL_CONTINUE:
            raise ValueError(f"failure outcome must be a non-empty value other than {SIGNAL_CONTINUE}")
        self.set(session_id, outcome)


class InMemorySignalStore(SignalStore):
    """ Process wide store; keys are spread over a fixed set of locks so unrelated sessions rarely contend """
    def __init__(self, shards: int = 64):
        if shards < 1:
            raise ValueError('shards must be >= 1')
        self._signals = {}
        self._locks = [threading.Lock() for _ in range(shards)]

    def _lock_for(self, session_id):
        return self._locks[hash(session_id) % len(self._locks)]

    def get_and_clear(self, session_id):
        with self._lock_for(session_id):
            return self._signals.pop(session_id, None)

    def set(self, session_id, signal):
        if signal is None:
            raise ValueError('signal must not be None')
        with self._lock_for(session_id):
            self._signals[session_id] = signal

    def __len__(self):
        return len(self._signals)


class RedisSignalStore(SignalStore):
    """ Signals kept as plain redis strings under <key_prefix><session_id>, without expiry """
    def __init__(self, client=None, redishost='localhost', port=6379, db=0, key_prefix='post_login_flow:'):
        self.client = client if client is not None else redis.Redis(host=redishost, port=port, db=db,
                                                                    decode_responses=True)
        self.key_prefix = key_prefix

    def _key(self, session_id):
        return f"{self.key_prefix}{session_id}"

    def get_and_clear(self, session_id):
        # GET and DEL in one MULTI/EXEC block
        pipe = self.client.pipeline(transaction=True)
        pipe.get(self._key(session_id))
        pipe.delete(self._key(session_id))
        value, _ = pipe.execute()
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        return value

    def set(self, session_id, signal):
        if signal is None:
            raise ValueError('signal must not be None')
        self.client.set(self._key(session_id), signal)


def signal_store_from_config(config: dict) -> SignalStore:
    store_config = config.get('signal_store', {})
    store_type = store_config.get('type', 'memory')
    if store_type == 'memory':
        logger.info('Using in-memory signal store: post login flow must run in this process')
        return InMemorySignalStore()
    if store_type == 'redis':
        logger.info(f"Using redis signal store at {store_config.get('redis_host', 'localhost')}")
        return RedisSignalStore(redishost=store_config.get('redis_host', 'localhost'),
                                port=int(store_config.get('redis_port', 6379)),
                                db=int(store_config.get('redis_db', 0)),
                                key_prefix=store_config.get('key_prefix', 'post_login_flow:'))
    raise UnconfiguredDependency(f"Unknown signal store type: {store_type}")
