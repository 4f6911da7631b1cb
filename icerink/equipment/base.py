"""
Abstract base class for all ice rink equipment.

This module defines the common interface that all equipment types must implement.
It provides a consistent API for:
- Process variable access (get_process_variables, get_process_variables_metadata)
- String representation

Usage:
    from icerink.equipment.base import Equipment, EquipmentType

    class MyEquipment(Equipment):
        def get_process_variables(self) -> Dict[str, Any]:
            return {"name": self.name, "value": self.value}

        @classmethod
        def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
            return {"name": {"type": str, "label": "Name"}, ...}
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Dict


class EquipmentType(Enum):
    """Enumeration of equipment types for categorization."""

    DIRECT_RINK = auto()
    INDIRECT_RINK = auto()
    RESURFACER = auto()
    OTHER = auto()


class Equipment(ABC):
    """
    Abstract base class for all simulated ice rink equipment.

    Attributes:
        name: Unique identifier for the equipment
        equipment_type: Type of equipment (from EquipmentType enum)

    Abstract Methods:
        get_process_variables: Return current state as dictionary
        get_process_variables_metadata: Return metadata for all variables
    """

    def __init__(self, name: str, equipment_type: EquipmentType = EquipmentType.OTHER) -> None:
        """
        Initialize base equipment.

        Args:
            name: Unique identifier for this equipment
            equipment_type: Type classification for this equipment
        """
        self.name = name
        self.equipment_type = equipment_type

    @abstractmethod
    def get_process_variables(self) -> Dict[str, Any]:
        """
        Return a dictionary of all process variables and their current values.

        Returns:
            Dictionary mapping variable names to their current values.
            Must include at least 'name' key.

        Example:
            {
                "name": "Main Rink",
                "refrig_mass_flow": 2.4,
                "ice_surface_temp": -4.8,
                "mode": "cooling"
            }
        """

    @classmethod
    @abstractmethod
    def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
        """
        Return metadata describing all process variables.

        Each metadata dict contains at least 'type' and 'label', and
        'unit' for physical quantities.

        Example:
            {
                "ice_surface_temp": {
                    "type": float,
                    "label": "Ice Surface Temperature",
                    "unit": "°C"
                },
                "mode": {
                    "type": str,
                    "label": "Operating Mode",
                    "options": ["not_operating", "cooling"]
                }
            }
        """

    def __str__(self) -> str:
        """Return string representation of equipment."""
        return f"{self.__class__.__name__}({self.name})"

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return f"{self.__class__.__name__}(name={self.name!r}, type={self.equipment_type.name})"
