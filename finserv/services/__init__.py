"""Business services: auth gateway, chat proxy, and the container that owns them."""

from .auth_gateway import AuthGateway
from .chat_proxy import ChatOutcome, ChatProxy
from .container import AppServices

__all__ = ["AppServices", "AuthGateway", "ChatOutcome", "ChatProxy"]
