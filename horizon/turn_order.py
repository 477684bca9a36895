"""
Circular turn-order container.

Holds the active entities in turn order plus a pointer to the entity whose
turn it is. Removals keep the pointer valid: it keeps pointing at the same
entity when an earlier slot is removed, and at the successor when the
current slot itself is removed.
"""

from typing import Iterator, List, Optional

from .entity import HorizonEntity
from .errors import EntityNotFoundError, InvalidArgumentError


class TurnOrder:
    """
    Ordered entity sequence with a circular pointer.

    Invariant: 0 <= pointer < len(self) whenever the sequence is non-empty,
    pointer == 0 when it is empty.
    """

    def __init__(self, entities: Optional[List[HorizonEntity]] = None, pointer: int = 0):
        self._entities: List[HorizonEntity] = list(entities or [])
        self._pointer = 0
        if self._entities:
            self._pointer = pointer % len(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[HorizonEntity]:
        return iter(self._entities)

    def __getitem__(self, index: int) -> HorizonEntity:
        return self._entities[index]

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def entities(self) -> List[HorizonEntity]:
        """Copy of the sequence in turn order."""
        return list(self._entities)

    def current(self) -> Optional[HorizonEntity]:
        """Entity at the pointer, or None when empty."""
        if not self._entities:
            return None
        return self._entities[self._pointer]

    def index_of(self, entity_id: int) -> int:
        """Index of the entity with the given id, or -1."""
        for i, entity in enumerate(self._entities):
            if entity.id == entity_id:
                return i
        return -1

    def get_by_id(self, entity_id: int) -> Optional[HorizonEntity]:
        """Linear lookup; None when absent."""
        index = self.index_of(entity_id)
        return self._entities[index] if index >= 0 else None

    def append(self, entity: HorizonEntity):
        if entity is None:
            raise InvalidArgumentError("Cannot add None to the turn order")
        self._entities.append(entity)

    def replace(self, entity_id: int, entity: HorizonEntity) -> HorizonEntity:
        """
        Put a new entity in the slot held by entity_id.

        Pointer is untouched since the slot keeps its index.

        Returns:
            The replaced entity

        Raises:
            EntityNotFoundError: if entity_id is not in the sequence
        """
        index = self.index_of(entity_id)
        if index < 0:
            raise EntityNotFoundError(f"Entity {entity_id} is not in the turn order")
        old = self._entities[index]
        self._entities[index] = entity
        return old

    def remove_by_id(self, entity_id: int) -> Optional[HorizonEntity]:
        """
        Remove the entity with the given id.

        If the removed slot was before the pointer, the pointer shifts back
        so it stays on the same entity. If the pointer ends up past the end,
        it wraps modulo the new size (0 when empty).

        Returns:
            The removed entity, or None when absent
        """
        index = self.index_of(entity_id)
        if index < 0:
            return None

        removed = self._entities.pop(index)
        if index < self._pointer:
            self._pointer -= 1

        size = len(self._entities)
        if size == 0:
            self._pointer = 0
        elif self._pointer >= size:
            self._pointer %= size
        return removed

    def advance(self) -> Optional[HorizonEntity]:
        """Move the pointer one slot forward (circular) and return the new current entity."""
        if not self._entities:
            return None
        self._pointer = (self._pointer + 1) % len(self._entities)
        return self._entities[self._pointer]

    def remove_current(self) -> Optional[HorizonEntity]:
        """Remove the entity at the pointer; pointer is clamped into range afterwards."""
        if not self._entities:
            return None

        removed = self._entities.pop(self._pointer)
        size = len(self._entities)
        if size == 0:
            self._pointer = 0
        elif self._pointer >= size:
            self._pointer = size - 1
        return removed

    def reset(self):
        """Point back at the first entity without touching membership."""
        self._pointer = 0

    def seek(self, entity_id: int) -> HorizonEntity:
        """
        Move the pointer onto the entity with the given id.

        Raises:
            EntityNotFoundError: if entity_id is not in the sequence
        """
        index = self.index_of(entity_id)
        if index < 0:
            raise EntityNotFoundError(f"Entity {entity_id} is not in the turn order")
        self._pointer = index
        return self._entities[index]
