from .tolerance_schema import ToleranceRelation
from .tolerance_registry import DEFAULT_RELATIONS, ToleranceRegistry

__all__ = [
    "ToleranceRelation",
    "DEFAULT_RELATIONS",
    "ToleranceRegistry",
]
