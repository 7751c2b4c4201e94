"""Domain entities."""

from authz.domain.entities.assignment import RoleAssignmentEntity, ValidityWindow

__all__ = ["RoleAssignmentEntity", "ValidityWindow"]
