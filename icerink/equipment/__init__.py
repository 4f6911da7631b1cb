"""Equipment base classes and type definitions for ice rink simulation."""

from icerink.equipment.base import Equipment, EquipmentType

__all__ = ["Equipment", "EquipmentType"]
