from flask import current_app
from models import db, Habit, SleepLog

def find(user_id, year, month):
    return (Habit.query.filter_by(user_id=user_id, year=year, month=month)
            .order_by(Habit.id).all())

def find_by_year(user_id, year):
    return (Habit.query.filter_by(user_id=user_id, year=year)
            .order_by(Habit.month, Habit.id).all())

def replace_all(user_id, year, month, habits):
    """Replace every habit in the (user, year, month) scope with `habits`.

    Delete and insert share one transaction, so a failed insert leaves the
    previous set in place instead of an empty month.
    """
    try:
        Habit.query.filter_by(user_id=user_id, year=year, month=month).delete(synchronize_session=False)
        created = [
            Habit(user_id=user_id, year=year, month=month,
                  name=h['name'], completions=dict(h.get('completions') or {}))
            for h in habits
        ]
        db.session.add_all(created)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Failed to replace habits for user %s %s-%02d', user_id, year, month)
        raise

    current_app.logger.info('Saved %d habits for user %s %s-%02d', len(created), user_id, year, month)
    return created

def find_sleep(user_id, year, month):
    log = SleepLog.query.filter_by(user_id=user_id, year=year, month=month).first()
    if not log:
        return {}
    return dict(log.entries or {})

def replace_sleep(user_id, year, month, entries):
    try:
        log = SleepLog.query.filter_by(user_id=user_id, year=year, month=month).first()
        if log:
            # Reassign so the JSON column is flagged dirty
            log.entries = dict(entries)
        else:
            log = SleepLog(user_id=user_id, year=year, month=month, entries=dict(entries))
            db.session.add(log)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Failed to save sleep data for user %s %s-%02d', user_id, year, month)
        raise
    return dict(log.entries)
