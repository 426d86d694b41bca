"""
Service layer for forkswarm.

Services orchestrate domain objects and infrastructure:
- SwarmCoordinator: Runs the snapshot pipeline end to end
- ManifestPublisher: Writes, commits and pushes the manifest
"""

from .publisher import ManifestPublisher, PublishOptions
from .coordinator import SwarmCoordinator, CoordinationResult

__all__ = [
    'ManifestPublisher',
    'PublishOptions',
    'SwarmCoordinator',
    'CoordinationResult',
]
