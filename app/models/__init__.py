# Recon Tracker: Database Models
# Import all models here for SQLAlchemy discovery

from app.models.team import Team                       # noqa
from app.models.user import User                       # noqa
from app.models.vehicle import Vehicle                 # noqa
from app.models.timeline_event import TimelineEvent    # noqa
from app.models.notification import Notification       # noqa
from app.models.vehicle_assignment import VehicleAssignment  # noqa
