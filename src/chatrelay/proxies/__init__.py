"""Single-shot vendor proxies for images and voice."""

from chatrelay.proxies.images import ImageProxy
from chatrelay.proxies.voice import VoiceProxy

__all__ = ["ImageProxy", "VoiceProxy"]
