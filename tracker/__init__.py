from .api import TrackerAPI, APIError, AuthError
from .session import SessionStore, AuthFlow
from .state import HabitTracker
from . import stats

__all__ = ['TrackerAPI', 'APIError', 'AuthError', 'SessionStore', 'AuthFlow', 'HabitTracker', 'stats']
