# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from teamops.models.calendar_event import CalendarEvent  # noqa: F401
from teamops.models.scrim import Scrim  # noqa: F401
from teamops.models.scrim_game import ScrimGame  # noqa: F401
from teamops.models.scrim_series import ScrimSeries  # noqa: F401
