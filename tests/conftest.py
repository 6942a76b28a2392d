"""pytest 全局 fixtures：测试环境隔离"""

import pytest


@pytest.fixture(autouse=True)
def no_real_routing(monkeypatch):
    """默认禁用真实路由服务，确保测试不依赖外部服务"""
    for name in (
        "ROUTING_PROVIDER",
        "ROUTING_SERVICE_URL",
        "ROUTING_API_TOKEN",
        "ROUTE_TIMEOUT_SECONDS",
        "ROUTE_CACHE_TTL_SECONDS",
        "DAY_START_TIME",
        "DEFAULT_TRAVEL_MODE",
        "DEFAULT_TIMEZONE",
        "LOCATION_DATA_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    # 重置进程内缓存，确保每个测试独立
    from itinerary_engine.infrastructure.cache import route_cache
    from itinerary_engine.planner.coordinates import default_tables

    route_cache.clear()
    default_tables.cache_clear()
    yield
    route_cache.clear()
