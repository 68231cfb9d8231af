"""Chat platform plumbing: payload translation, REST client and interactions."""

from shopbot.discord.client import DiscordClient
from shopbot.discord.interaction import WebhookInteraction
from shopbot.discord.payloads import parse_interaction

__all__ = ["DiscordClient", "WebhookInteraction", "parse_interaction"]
