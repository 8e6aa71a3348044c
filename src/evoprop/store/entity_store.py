"""
Entity Store Module

This module implements the arena every simulated object lives in. Nodes,
connections, datasets, agents and the components driving them refer to each
other through the integer handles issued by the store, never through direct
references, so that any entity can be removed without leaving dangling
pointers behind: a handle to a removed entity simply stops resolving.

Classes:
    Entity:      Base class of all objects kept in the store
    EntityStore: Arena of entities addressed by generation-checked handles
"""

from typing import Iterator, TypeVar

from loguru import logger

# Handles pack the slot index in the lower 32 bits and the
# generation of the slot in the upper bits.
_SLOT_BITS = 32
_SLOT_MASK = (1 << _SLOT_BITS) - 1

# Handle value of a reference that was never set
INVALID_ID = -1

E = TypeVar('E', bound='Entity')

class Entity:
    """
    Base class for all objects that live in an EntityStore.

    Public Attributes:
        id: The handle assigned by the store on insertion (INVALID_ID until inserted)
    """

    def __init__(self):
        self.id: int = INVALID_ID

class EntityStore:
    """
    An arena of entities addressed by stable integer handles.

    Each handle combines a slot index with the generation of that slot. When an
    entity is removed its slot is recycled with an incremented generation, so a
    stale handle to the old occupant never resolves to the new one.

    Removal is deferred: 'remove' only marks an entity as dead, and the entity
    stays resolvable until 'flush' is called (once per tick, after every
    component has finished reading the entities of that tick).

    Public Methods:
        insert(entity):                Add an entity, returning its new handle
        get(handle):                   Resolve a handle (None if stale or unknown)
        get_of_type(handle, cls):      Resolve a handle to an entity of a given type
        require_of_type(handle, cls):  Like get_of_type, but raising on failure
        of_type(cls):                  Iterate all live entities of a given type
        remove(handle):                Mark an entity for removal
        is_dead(handle):               Whether an entity is marked for removal
        flush():                       Free the slots of all entities marked for removal
    """

    def __init__(self):
        self._entities   : list[Entity | None] = []   # slot => entity
        self._generations: list[int]           = []   # slot => current generation
        self._free_slots : list[int]           = []
        self._dead       : set[int]            = set()

    @staticmethod
    def _split(handle: int) -> tuple[int, int]:
        return handle & _SLOT_MASK, handle >> _SLOT_BITS

    def _slot_of(self, handle: int) -> int | None:
        """The slot currently addressed by 'handle', or None if the handle is stale or invalid."""
        if handle is None or handle < 0:
            return None
        slot, generation = self._split(handle)
        if slot >= len(self._entities) or self._generations[slot] != generation:
            return None
        if self._entities[slot] is None:
            return None
        return slot

    def insert(self, entity: E) -> int:
        """
        Add an entity to the store.

        Parameters:
            entity: the entity to add; its 'id' attribute is set to the new handle

        Returns:
            the handle assigned to the entity
        """
        if self._free_slots:
            slot = self._free_slots.pop()
            self._entities[slot] = entity
        else:
            slot = len(self._entities)
            self._entities.append(entity)
            self._generations.append(0)

        handle = (self._generations[slot] << _SLOT_BITS) | slot
        entity.id = handle
        return handle

    def get(self, handle: int) -> Entity | None:
        """The entity addressed by 'handle', or None if it does not exist (anymore)."""
        slot = self._slot_of(handle)
        return None if slot is None else self._entities[slot]

    def get_of_type(self, handle: int, cls: type[E]) -> E | None:
        """The entity addressed by 'handle' if it exists and is an instance of 'cls', otherwise None."""
        entity = self.get(handle)
        return entity if isinstance(entity, cls) else None

    def require_of_type(self, handle: int, cls: type[E]) -> E:
        """
        The entity addressed by 'handle', which must exist and be an instance of 'cls'.

        Raises:
            KeyError:  if the handle does not resolve
            TypeError: if the entity is not an instance of 'cls'
        """
        entity = self.get(handle)
        if entity is None:
            raise KeyError(f"No entity with id {handle}")
        if not isinstance(entity, cls):
            raise TypeError(f"Entity {handle} is a {type(entity).__name__}, expected {cls.__name__}")
        return entity

    def of_type(self, cls: type[E]) -> Iterator[E]:
        """Iterate, in slot order, all entities of type 'cls' that are not marked for removal."""
        for entity in self._entities:
            if isinstance(entity, cls) and entity.id not in self._dead:
                yield entity

    def remove(self, handle: int) -> None:
        """Mark the entity addressed by 'handle' for removal. Unknown handles are ignored."""
        if self._slot_of(handle) is not None:
            self._dead.add(handle)

    def is_dead(self, handle: int) -> bool:
        """Whether the entity addressed by 'handle' is marked for removal."""
        return handle in self._dead

    def flush(self) -> int:
        """
        Remove all entities marked for removal, recycling their slots.

        Returns:
            the number of entities removed
        """
        removed = 0
        for handle in self._dead:
            slot = self._slot_of(handle)
            if slot is None:
                continue
            self._entities[slot]     = None
            self._generations[slot] += 1
            self._free_slots.append(slot)
            removed += 1
        self._dead.clear()

        if removed:
            logger.debug("[EntityStore] Flushed {} entities, {} remaining", removed, len(self))
        return removed

    def __contains__(self, handle: int) -> bool:
        return self._slot_of(handle) is not None

    def __len__(self) -> int:
        return len(self._entities) - len(self._free_slots)
