import codecs
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from nepriziv.core.config import settings
from nepriziv.infrastructure.exceptions import InfrastructureError
from nepriziv.infrastructure.external_apis import AIGatewayClient, parse_stream_delta
from nepriziv.infrastructure.response import error_response, not_found_response
from nepriziv.models.chat import ChatConversation
from nepriziv.models.user import User
from nepriziv.schemas.ai import ChatRequest
from nepriziv.services.ai.gateway_errors import gateway_error_response
from nepriziv.services.ai.prompts import CONSULTATION_SYSTEM_PROMPT
from nepriziv.services.core.chat_history_service import ChatHistoryService
from nepriziv.services.core.entitlements import ACTION_AI
from nepriziv.services.core.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

INVALID_REQUEST_MSG = "Неверный формат запроса"


class StreamTextCollector:
    """
    从SSE字节流中累计 delta.content

    块边界可能截断一行或一个UTF-8字符，未完成的部分留到下一块
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.parts: List[str] = []

    def feed(self, chunk: bytes) -> None:
        self._buffer += self._decoder.decode(chunk)
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        for line in lines:
            self._take(line)

    def close(self) -> None:
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer:
            self._take(self._buffer)
            self._buffer = ""

    def _take(self, line: str) -> None:
        delta = parse_stream_delta(line)
        if delta:
            self.parts.append(delta)

    @property
    def text(self) -> str:
        return "".join(self.parts)


class ConsultationService:
    """
    AI咨询（流式）

    校验 -> 额度 -> 连接网关取第一块（错误在这里映射成响应）-> 计数 -> 转发SSE；
    带 conversation_id 时把本轮用户消息和完整回复写入对话历史
    """

    @staticmethod
    def build_payload(messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "model": settings.AI_CHAT_MODEL,
            "messages": [{"role": "system", "content": CONSULTATION_SYSTEM_PROMPT}, *messages],
        }

    @staticmethod
    async def start_chat(
        db: Session,
        user: User,
        body: Any,
        ai_client: AIGatewayClient,
    ) -> Union[dict, AsyncIterator[bytes]]:
        """
        返回错误响应dict，或者要原样转发给客户端的SSE字节流
        """
        try:
            request = ChatRequest.model_validate(body)
        except ValidationError as e:
            logger.info(f"咨询请求校验失败: {e.error_count()} 个错误")
            return error_response(msg=INVALID_REQUEST_MSG, code=400)

        conversation: Optional[ChatConversation] = None
        if request.conversation_id:
            conversation = ChatHistoryService.get_owned_conversation(db, user, request.conversation_id)
            if conversation is None:
                return not_found_response("Диалог")

        quota_error = SubscriptionService.reserve(db, user, ACTION_AI)
        if quota_error:
            return quota_error

        messages = [m.model_dump() for m in request.messages]
        upstream = ai_client.stream_chat_completion(ConsultationService.build_payload(messages))
        try:
            first_chunk = await upstream.__anext__()
        except StopAsyncIteration:
            first_chunk = b""
        except InfrastructureError as e:
            SubscriptionService.release(db, user, ACTION_AI)
            return gateway_error_response(e)

        if conversation is not None:
            last_user = next((m for m in reversed(request.messages) if m.role == "user"), None)
            if last_user is not None:
                ChatHistoryService.append_message(db, conversation, "user", last_user.content)

        conversation_id = conversation.id if conversation is not None else None
        return ConsultationService._relay(db, conversation_id, first_chunk, upstream)

    @staticmethod
    async def _relay(
        db: Session,
        conversation_id: Optional[int],
        first_chunk: bytes,
        upstream: AsyncIterator[bytes],
    ) -> AsyncIterator[bytes]:
        collector = StreamTextCollector()
        completed = False
        try:
            if first_chunk:
                collector.feed(first_chunk)
                yield first_chunk
            async for chunk in upstream:
                collector.feed(chunk)
                yield chunk
            completed = True
        finally:
            collector.close()
            if conversation_id is not None and completed and collector.text:
                try:
                    # 流结束时请求里的对象可能已脱离会话，按ID重新取
                    conversation = db.query(ChatConversation).filter(ChatConversation.id == conversation_id).first()
                    if conversation is not None:
                        ChatHistoryService.append_message(db, conversation, "assistant", collector.text)
                except Exception as e:
                    logger.error(f"保存AI回复失败: {str(e)}")


consultation_service = ConsultationService()
