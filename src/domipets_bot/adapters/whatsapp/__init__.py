"""Adapter Meta/WhatsApp Cloud API: webhook inbound e envio outbound."""

from domipets_bot.adapters.whatsapp.composer import LoggingComposer, WhatsAppComposer
from domipets_bot.adapters.whatsapp.inbound import extract_inbound_events
from domipets_bot.adapters.whatsapp.outbound import WhatsAppOutboundClient

__all__ = [
    "LoggingComposer",
    "WhatsAppComposer",
    "WhatsAppOutboundClient",
    "extract_inbound_events",
]
