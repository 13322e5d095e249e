# backgammon_engine/api/__init__.py

from .schemas import (
    LocationField,
    MoveCommandSchema,
    GameSnapshotSchema
)
