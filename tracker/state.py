import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date
from itertools import count

from . import stats
from .stats import SLEEP_HOURS
from .api import APIError, AuthError

logger = logging.getLogger(__name__)

def toggle_completion(completions, day, days):
    """Return a new completions map with `day` flipped. Absent means not done."""
    if day < 1 or day > days:
        raise ValueError(f'day {day} is outside 1..{days}')
    updated = dict(completions)
    if updated.get(day):
        del updated[day]
    else:
        updated[day] = True
    return updated

def toggle_sleep(entries, day, hour, days):
    """Return a new sleep map; picking the hour already set clears the day."""
    if hour not in SLEEP_HOURS:
        raise ValueError(f'{hour} is not a trackable number of hours')
    if day < 1 or day > days:
        raise ValueError(f'day {day} is outside 1..{days}')
    updated = dict(entries)
    if updated.get(day) == hour:
        del updated[day]
    else:
        updated[day] = hour
    return updated

class SaveQueue:
    """Runs saves one at a time in the background.

    Every submit bumps a version for its key (e.g. habits of one month). A job
    that is no longer the newest for its key when its turn comes is skipped,
    so an older snapshot can never land after a newer one.
    """

    def __init__(self, executor=None):
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix='tracker-save')
        self._lock = threading.Lock()
        self._versions = {}
        self._futures = []

    def submit(self, key, func, *args):
        with self._lock:
            version = self._versions.get(key, 0) + 1
            self._versions[key] = version
        future = self._executor.submit(self._run, key, version, func, args)
        with self._lock:
            self._futures = [f for f in self._futures if not f.done()] + [future]
        return future

    def version(self, key):
        with self._lock:
            return self._versions.get(key, 0)

    def _run(self, key, version, func, args):
        with self._lock:
            if self._versions.get(key) != version:
                logger.debug('Skipping superseded save %s (v%d)', key, version)
                return None
        return func(*args)

    def flush(self, timeout=None):
        with self._lock:
            pending = list(self._futures)
        wait(pending, timeout=timeout)

    def close(self):
        self._executor.shutdown(wait=True)

class HabitTracker:
    """Client-side state for one month of habits and sleep.

    Every mutation updates local state first and then hands a full snapshot of
    the month to the save queue without waiting for it. Failed saves are only
    logged; local state is kept as is until the next load replaces it.
    """

    def __init__(self, api, auth=None, today=None, save_queue=None):
        self.api = api
        self.auth = auth
        today = today or date.today()
        self.current_year = today.year
        self.current_month = today.month
        self.habits = []
        self.sleep_data = {}
        self.save_queue = save_queue or SaveQueue()
        self._local_ids = count(1)
        # Set by the save worker on a 401; the logout itself happens on the caller's thread
        self._auth_failed = threading.Event()

    @property
    def days_in_month(self):
        return stats.days_in_month(self.current_year, self.current_month)

    @property
    def is_logged_in(self):
        if self.auth is not None:
            return self.auth.is_logged_in
        return bool(self.api.token)

    # Navigation

    def select_date(self, selected):
        self.current_year = selected.year
        self.current_month = selected.month
        self.load()

    def shift_month(self, delta):
        index = self.current_year * 12 + (self.current_month - 1) + delta
        self.current_year, month_index = divmod(index, 12)
        self.current_month = month_index + 1
        self.load()

    # Loading

    def load(self):
        # Queued saves must land before the server state is read back
        self.save_queue.flush()
        if self._apply_auth_failure():
            return
        self.load_habits()
        self.load_sleep_data()

    def load_habits(self):
        if not self.is_logged_in:
            return
        try:
            rows = self.api.get_habits(self.current_year, self.current_month)
        except AuthError as e:
            self._session_lost(e)
            return
        except APIError as e:
            logger.error('Failed to load habits: %s', e)
            self.habits = []
            return

        self.habits = [
            {
                'id': row['id'],
                'name': row['name'],
                'completions': {int(day): True for day, done in (row.get('completions') or {}).items() if done},
            }
            for row in rows
        ]

    def load_sleep_data(self):
        if not self.is_logged_in:
            return
        try:
            entries = self.api.get_sleep_data(self.current_year, self.current_month)
        except AuthError as e:
            self._session_lost(e)
            return
        except APIError as e:
            logger.error('Failed to load sleep data: %s', e)
            self.sleep_data = {}
            return
        self.sleep_data = {int(day): hours for day, hours in (entries or {}).items()}

    # Saving

    def save_habits(self):
        if not self.is_logged_in:
            return None
        snapshot = [
            {'name': h['name'], 'completions': {str(day): True for day in h['completions']}}
            for h in self.habits
        ]
        key = ('habits', self.current_year, self.current_month)
        return self.save_queue.submit(key, self._send, 'habits', self.api.save_habits,
                                      self.current_year, self.current_month, snapshot)

    def save_sleep_data(self):
        if not self.is_logged_in:
            return None
        snapshot = {str(day): hours for day, hours in self.sleep_data.items()}
        key = ('sleep', self.current_year, self.current_month)
        return self.save_queue.submit(key, self._send, 'sleep data', self.api.save_sleep_data,
                                      self.current_year, self.current_month, snapshot)

    def _send(self, label, call, year, month, snapshot):
        try:
            return call(year, month, snapshot)
        except AuthError as e:
            logger.warning('Save of %s rejected by server: %s', label, e)
            self._auth_failed.set()
        except APIError as e:
            logger.error('Failed to save %s for %s-%02d: %s', label, year, month, e)
        return None

    def flush(self, timeout=None):
        self.save_queue.flush(timeout)

    def close(self):
        self.save_queue.close()

    def _session_lost(self, error):
        logger.warning('Session rejected by server: %s', error)
        if self.auth is not None:
            self.auth.logout()
        else:
            self.api.token = None
        self.habits = []
        self.sleep_data = {}

    def _apply_auth_failure(self):
        if not self._auth_failed.is_set():
            return False
        self._auth_failed.clear()
        self._session_lost('save rejected with 401')
        return True

    # Mutations

    def add_habit(self, name):
        if self._apply_auth_failure():
            return None
        if not name or not name.strip():
            return None
        habit = {'id': f'local-{next(self._local_ids)}', 'name': name.strip(), 'completions': {}}
        self.habits = self.habits + [habit]
        self.save_habits()
        return habit

    def delete_habit(self, habit_id):
        if self._apply_auth_failure():
            return
        self.habits = [h for h in self.habits if h['id'] != habit_id]
        self.save_habits()

    def toggle_day(self, habit_id, day):
        if self._apply_auth_failure():
            return
        if not any(h['id'] == habit_id for h in self.habits):
            return
        days = self.days_in_month
        self.habits = [
            dict(h, completions=toggle_completion(h['completions'], day, days)) if h['id'] == habit_id else h
            for h in self.habits
        ]
        self.save_habits()

    def toggle_sleep_hour(self, day, hour):
        if self._apply_auth_failure():
            return
        self.sleep_data = toggle_sleep(self.sleep_data, day, hour, self.days_in_month)
        self.save_sleep_data()

    # Reports

    def get_progress(self, habit):
        return stats.get_progress(habit, self.days_in_month)

    def get_monthly_stats(self):
        return stats.get_monthly_stats(self.habits, self.days_in_month)

    def get_habit_rows(self):
        days = self.days_in_month
        return [
            {'id': h['id'], 'name': h['name'], 'completed': stats.completion_count(h),
             'percentage': stats.habit_percentage(h, days)}
            for h in self.habits
        ]

    def get_yearly_report(self, year=None):
        self.save_queue.flush()
        if self._apply_auth_failure():
            return []
        year = year or self.current_year
        try:
            rows = self.api.get_yearly_report(year)
        except AuthError as e:
            self._session_lost(e)
            return []
        except APIError as e:
            logger.error('Failed to load yearly report: %s', e)
            return []
        return stats.get_yearly_report(year, rows)
