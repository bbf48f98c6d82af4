from prometheus_client import Counter, CollectorRegistry, generate_latest


registry = CollectorRegistry()


cache_hits = Counter(
    'cache_hits_total',
    'Cached aggregate reads served without recomputation',
    ['key'],
    registry=registry
)

cache_misses = Counter(
    'cache_misses_total',
    'Cached aggregate reads that had to recompute',
    ['key'],
    registry=registry
)

cache_invalidations = Counter(
    'cache_invalidations_total',
    'Cache generation bumps',
    ['reason'],
    registry=registry
)

backfill_sessions = Counter(
    'backfill_sessions_total',
    'Days visited by auto-completion, by outcome',
    ['outcome'],
    registry=registry
)

engine_operations = Counter(
    'engine_operations_total',
    'Mutating engine operations',
    ['operation', 'status'],
    registry=registry
)


def get_metrics() -> bytes:
    """Render all engine metrics in Prometheus text format."""
    return generate_latest(registry)
