"""
Store Package

The entity arena shared by all simulated objects, and the event channel
used to send commands between them.

Exported Classes:
    Entity:        Base class of all objects kept in the store
    EntityStore:   Arena of entities addressed by generation-checked handles
    EventListener: Interface of entities that react to event messages
    EventChannel:  Delivers event messages to entities in an EntityStore

Exported Constants:
    INVALID_ID:    Handle value of a reference that was never set
"""

from evoprop.store.entity_store import Entity, EntityStore, INVALID_ID
from evoprop.store.events       import EventChannel, EventListener

__all__ = ['Entity',
           'EntityStore',
           'EventChannel',
           'EventListener',
           'INVALID_ID']
