"""
tablemodel framework -- parameter tracking and the model dispatcher.

This module provides:
- ModelParams: tracked-access parameter map
- ModelOperations: class-parameterized CRUD dispatcher
- AbstractModel: inheritance-based model base class
"""

from tablemodel.framework.model import AbstractModel
from tablemodel.framework.operations import ModelOperations
from tablemodel.framework.params import ModelParams

__all__ = [
    "AbstractModel",
    "ModelOperations",
    "ModelParams",
]
