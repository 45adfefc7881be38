"""
Outbound HTTP proxy: request normalizing, response caching, dispatch with
timeout, retry with exponential backoff, and uniform result formatting.
"""

from appcraft.modules.proxy.cache import CacheEntry, ResponseCache
from appcraft.modules.proxy.dispatcher import AttemptOutcome, Dispatcher, OutcomeKind
from appcraft.modules.proxy.normalizer import NormalizedRequest, ProxyDefaults, normalize_request
from appcraft.modules.proxy.retry import RetryPolicy, run_with_retries
from appcraft.modules.proxy.service import ProxyService

__all__ = [
    'CacheEntry',
    'ResponseCache',
    'AttemptOutcome',
    'Dispatcher',
    'OutcomeKind',
    'NormalizedRequest',
    'ProxyDefaults',
    'normalize_request',
    'RetryPolicy',
    'run_with_retries',
    'ProxyService',
]
