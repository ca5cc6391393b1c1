"""SQLAlchemy models for StayDesk.

All models are imported here so that ``Base.metadata.create_all`` can
discover them. If you add a new model, import it in this file.
"""

from staydesk.models.guest import Guest
from staydesk.models.stay_record import StayRecord

__all__ = [
    "Guest",
    "StayRecord",
]
