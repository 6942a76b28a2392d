"""异步 HTTP 客户端：外部路由服务调用的统一出口

职责：
  1. 统一超时策略，超时与网络故障分别映射为不同异常
  2. 自动脱敏异常中的 Token
  3. 隔离 httpx 依赖
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from itinerary_engine.security.redact import redact_sensitive
from itinerary_engine.shared.exceptions import RoutingTimeout, RoutingUnavailable


class AsyncHttpClient:
    """封装 httpx.AsyncClient，自动脱敏异常"""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_retries: int = 0,
        tool_name: str = "http",
        secrets: tuple[str, ...] = (),
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout
        self._max_retries = max_retries
        self._tool_name = tool_name
        self._secrets = secrets
        self._transport = transport

    def _scrub(self, text: str) -> str:
        return redact_sensitive(text, secrets=self._secrets)

    async def post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
        passthrough_status: frozenset[int] = frozenset(),
    ) -> tuple[int, dict[str, Any]]:
        """
        执行 POST 请求并返回 (status_code, JSON)。
        2xx 与 passthrough_status 中的状态码正常返回，其余抛出 RoutingUnavailable。
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self._max_retries + 2):
            try:
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    resp = await client.post(url, json=payload, headers=headers)
                if resp.status_code in passthrough_status:
                    return resp.status_code, _json_body(resp)
                resp.raise_for_status()
                body = resp.json()
                if not isinstance(body, dict):
                    raise RoutingUnavailable(self._tool_name, "响应不是 JSON 对象")
                return resp.status_code, body
            except httpx.HTTPStatusError as e:
                last_error = RoutingUnavailable(
                    self._tool_name, f"HTTP {e.response.status_code}: {self._scrub(str(e))}"
                )
            except httpx.TimeoutException:
                last_error = RoutingTimeout(self._tool_name, f"请求超时（{self._timeout}s），第 {attempt} 次尝试")
            except httpx.HTTPError as e:
                last_error = RoutingUnavailable(self._tool_name, f"网络请求失败: {self._scrub(str(e))}")
            except ValueError as e:
                last_error = RoutingUnavailable(self._tool_name, f"响应解析失败: {self._scrub(str(e))}")

            if attempt <= self._max_retries:
                await asyncio.sleep(0.25 * attempt)  # 简单退避

        raise last_error  # type: ignore[misc]


def _json_body(resp: httpx.Response) -> dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


__all__ = ["AsyncHttpClient"]
