"""Device session management core."""

from raymote.core.broadcaster import EventBroadcaster, Subscriber
from raymote.core.ports import list_ports
from raymote.core.receiver import ReceiverSession
from raymote.core.supervisor import SessionSupervisor
from raymote.core.transmitter import TransmitterSession

__all__ = [
    "EventBroadcaster",
    "ReceiverSession",
    "SessionSupervisor",
    "Subscriber",
    "TransmitterSession",
    "list_ports",
]
