"""OpenAI兼容的AI网关（chat completions）客户端。"""

import json
import logging
import re
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp
from json_repair import repair_json

from nepriziv.core.config import settings
from nepriziv.infrastructure.exceptions import AIGatewayError, AIGatewayNotConfiguredError

logger = logging.getLogger(__name__)

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    从模型回复中取出JSON对象

    先取第一个 {...} 片段（没有就用整段回复），交给json_repair修复解析；
    结果不是dict时视为解析失败返回None
    """
    if not text:
        return None
    match = _JSON_OBJECT_PATTERN.search(text)
    candidate = match.group(0) if match else text
    try:
        parsed = repair_json(candidate, return_objects=True)
    except Exception as e:
        logger.warning(f"JSON修复失败: {str(e)}")
        return None
    return parsed if isinstance(parsed, dict) else None


def message_content(response: Dict[str, Any]) -> str:
    """choices[0].message.content，缺失时返回空字符串"""
    try:
        return response["choices"][0]["message"].get("content") or ""
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


def parse_stream_delta(line: str) -> Optional[str]:
    """
    解析SSE中的一行 `data: {...}`，返回 delta.content

    [DONE]、空行、注释行和无法解析的行返回None
    """
    line = line.strip()
    if not line.startswith("data:"):
        return None
    payload = line[5:].strip()
    if not payload or payload == "[DONE]":
        return None
    try:
        data = json.loads(payload)
        return data["choices"][0]["delta"].get("content")
    except (ValueError, KeyError, IndexError, TypeError, AttributeError):
        return None


class AIGatewayClient:
    """
    AI网关客户端

    API key 在请求时才检查，未配置时抛 AIGatewayNotConfiguredError，
    网关返回非200时抛 AIGatewayError（保留状态码，429/402 需要单独映射）
    """

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None, timeout: Optional[int] = None):
        self.api_url = api_url or settings.AI_GATEWAY_URL
        self.api_key = api_key if api_key is not None else settings.AI_GATEWAY_API_KEY
        self.timeout = timeout or settings.AI_TIMEOUT

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise AIGatewayNotConfiguredError()
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        非流式调用

        参数:
            payload: 请求体（model、messages 等）
        返回:
            网关返回的JSON
        """
        headers = self._headers()
        logger.info(f"AI请求: model={payload.get('model')}, messages={len(payload.get('messages', []))}")

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.api_url, headers=headers, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    logger.error(f"AI网关错误: {response.status}")
                    raise AIGatewayError(response.status, body)
                return await response.json(content_type=None)

    async def stream_chat_completion(self, payload: Dict[str, Any]) -> AsyncIterator[bytes]:
        """
        流式调用，逐块返回网关的SSE原始字节

        这是异步生成器：连接和状态码检查发生在取第一块时
        """
        headers = self._headers()
        payload = {**payload, "stream": True}
        logger.info(f"AI流式请求: model={payload.get('model')}, messages={len(payload.get('messages', []))}")

        timeout = aiohttp.ClientTimeout(total=None, sock_read=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.api_url, headers=headers, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    logger.error(f"AI网关错误: {response.status}")
                    raise AIGatewayError(response.status, body)
                async for chunk in response.content.iter_any():
                    yield chunk


_default_client: Optional[AIGatewayClient] = None


def get_ai_gateway_client() -> AIGatewayClient:
    global _default_client
    if _default_client is None:
        _default_client = AIGatewayClient()
    return _default_client
