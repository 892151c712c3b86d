"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking pieces of the server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  LISTENER          create_listener() → bound, listening socket      │
    │  INTEREST SET      descriptors watched for read-readiness           │
    │  CONNECTION        one accepted client, one exchange                │
    │  EVENT LOOP        wait → accept / read-respond-close → repeat      │
    └─────────────────────────────────────────────────────────────────────┘

Everything runs on one thread. The wait on the interest set is the only
place the server blocks between requests.
=============================================================================
"""

from .listener import create_listener, resolve_bind_address, ListenerError
from .interest_set import InterestSet
from .connection import Connection, ConnectionState
from .event_loop import EventLoop, LoopError

__all__ = [
    "create_listener",
    "resolve_bind_address",
    "ListenerError",
    "InterestSet",
    "Connection",
    "ConnectionState",
    "EventLoop",
    "LoopError",
]
