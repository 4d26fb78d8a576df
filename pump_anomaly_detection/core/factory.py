"""
Factory Pattern for Detector Creation

Detectors register themselves by name when their module is imported; the
engine builder asks the factory for instances and hands over whichever shared
collaborators (threshold table, history store) each detector accepts.
"""

import inspect
from typing import Any, Dict, List, Optional, Type

from .base import BaseDetector


class DetectorFactory:
    """
    Registry of named detector strategies.

    Factory Pattern: Centralized detector instantiation.
    """

    _detectors: Dict[str, Type[BaseDetector]] = {}

    @classmethod
    def register(cls, name: str, detector_class: Type[BaseDetector]) -> None:
        """
        Register a detector class.

        Args:
            name: Detector identifier (e.g., 'physics')
            detector_class: BaseDetector subclass
        """
        cls._detectors[name] = detector_class

    @classmethod
    def accepted_dependencies(cls, detector_type: str) -> List[str]:
        """Constructor keywords of a registered detector, other than config."""
        params = inspect.signature(cls._lookup(detector_type).__init__).parameters
        return [name for name in params if name not in ('self', 'config')]

    @classmethod
    def create(cls, detector_type: str, config: Optional[Dict[str, Any]] = None, **dependencies) -> BaseDetector:
        """
        Create a detector, passing only the collaborators it accepts.

        Args:
            detector_type: Detector identifier
            config: Configuration dictionary
            **dependencies: Shared collaborators on offer (thresholds, history)

        Returns:
            Detector instance

        Raises:
            ValueError: If detector type not registered
        """
        detector_class = cls._lookup(detector_type)
        accepted = cls.accepted_dependencies(detector_type)
        wanted = {name: dep for name, dep in dependencies.items() if name in accepted}
        return detector_class(config=config, **wanted)

    @classmethod
    def get_available(cls) -> list:
        return list(cls._detectors.keys())

    @classmethod
    def _lookup(cls, detector_type: str) -> Type[BaseDetector]:
        if detector_type not in cls._detectors:
            raise ValueError(f"Unknown detector type: {detector_type}. Available: {cls.get_available()}")
        return cls._detectors[detector_type]
