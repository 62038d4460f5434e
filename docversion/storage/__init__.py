"""
Record storage backends used by the migration engine.
"""

from docversion.storage.base import RecordStore
from docversion.storage.motor_store import MotorRecordStore

__all__ = ["RecordStore", "MotorRecordStore"]
