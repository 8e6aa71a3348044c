"""
Event Module

String-tagged messages ("START", "STOP", "RESET", "SPIN", ...) are the only
way components command each other. A message is addressed to an entity
handle and delivered synchronously, within the tick in which it is sent.

Classes:
    EventListener: Interface of entities that react to event messages
    EventChannel:  Delivers event messages to entities in an EntityStore
"""

from abc import ABC, abstractmethod

from loguru import logger

from evoprop.store.entity_store import EntityStore

class EventListener(ABC):
    """
    Interface of entities that can receive event messages.
    Messages a listener does not recognize are ignored.
    """

    @abstractmethod
    def handle_event(self, message: str) -> None:
        """
        Handle an incoming event message.

        Parameters:
            message: the event message, e.g. "START"
        """
        pass

class EventChannel:
    """
    Dispatches event messages to the entities of a store, by handle.
    """

    def __init__(self, store: EntityStore):
        """
        Parameters:
            store: the store in which message targets are resolved
        """
        self._store: EntityStore = store

    def send(self, target_id: int, message: str) -> bool:
        """
        Deliver a message to an entity.

        Parameters:
            target_id: handle of the entity receiving the message
            message:   the event message

        Returns:
            True if the message was delivered, False if the target does not
            exist (anymore) or does not listen to events
        """
        target = self._store.get_of_type(target_id, EventListener)
        if target is None:
            logger.warning("[EventChannel] Cannot deliver '{}': {} is not a listener", message, target_id)
            return False

        logger.debug("[EventChannel] '{}' => {}({})", message, type(target).__name__, target_id)
        target.handle_event(message)
        return True
