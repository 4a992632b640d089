import logging
from typing import Optional

from nepriziv.core.config import settings
from nepriziv.infrastructure.exceptions import InfrastructureError
from nepriziv.infrastructure.external_apis import AIGatewayClient, extract_json_object, message_content
from nepriziv.infrastructure.response import success_response
from nepriziv.services.ai.gateway_errors import gateway_error_response
from nepriziv.services.ai.prompts import GOVERNMENT_STRUCTURES_SYSTEM_PROMPT, government_structures_prompt

logger = logging.getLogger(__name__)

STRUCTURE_KEYS = (
    "military_commissariat",
    "military_commissariat_address",
    "superior_military_commissariat",
    "superior_military_commissariat_address",
    "court_by_military",
    "court_by_registration",
    "prosecutor_office",
)


def fallback_suggestions() -> dict:
    suggestions = {key: "" for key in STRUCTURE_KEYS}
    suggestions["military_commissariat"] = "Не удалось определить"
    return suggestions


class GovernmentStructuresService:
    """按城市/地区/地址查询призывник相关的国家机构"""

    @staticmethod
    async def find(
        ai_client: AIGatewayClient,
        city: Optional[str] = None,
        address: Optional[str] = None,
        region: Optional[str] = None,
    ):
        payload = {
            "model": settings.AI_CHAT_MODEL,
            "messages": [
                {"role": "system", "content": GOVERNMENT_STRUCTURES_SYSTEM_PROMPT},
                {"role": "user", "content": government_structures_prompt(city, address, region)},
            ],
            "temperature": 0.3,
        }
        try:
            response = await ai_client.chat_completion(payload)
        except InfrastructureError as e:
            return gateway_error_response(e)

        parsed = extract_json_object(message_content(response))
        if parsed is None:
            logger.warning("国家机构查询结果无法解析为JSON")
            suggestions = fallback_suggestions()
        else:
            suggestions = {key: str(parsed.get(key) or "") for key in STRUCTURE_KEYS}

        return success_response(data={"suggestions": suggestions})


government_structures_service = GovernmentStructuresService()
