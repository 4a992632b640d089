"""
External APIs integration package.

This package contains clients for external API services.
"""

from .ai_gateway_client import (
    AIGatewayClient,
    get_ai_gateway_client,
    extract_json_object,
    message_content,
    parse_stream_delta,
)
from .resend_client import ResendClient, get_resend_client

__all__ = [
    'AIGatewayClient',
    'get_ai_gateway_client',
    'extract_json_object',
    'message_content',
    'parse_stream_delta',
    'ResendClient',
    'get_resend_client',
]
