"""Aggregations behind the monthly and yearly reports.

Habits are plain dicts carrying a ``completions`` mapping of day -> True.
Percentages are returned as one-decimal strings to match what the reports
display; empty months of the yearly report keep a numeric ``0``.
"""
import calendar

# Mirrors the server side (utils.py); the client package never imports server modules
SLEEP_HOURS = (4, 4.5, 5, 5.5, 6, 6.5, 7, 7.5, 8)

def days_in_month(year, month):
    return calendar.monthrange(year, month)[1]

def completion_count(habit):
    return len(habit.get('completions') or {})

def format_percentage(value):
    return f'{value:.1f}'

def get_progress(habit, days):
    # Not clamped: more completions than days would exceed 100
    return completion_count(habit) / days * 100

def habit_percentage(habit, days):
    return format_percentage(get_progress(habit, days))

def best_habit(habits):
    best = {}
    for habit in habits:
        count = completion_count(habit)
        if count > best.get('count', 0):
            best = {'name': habit['name'], 'count': count}
    return best

def get_monthly_stats(habits, days):
    total_days = len(habits) * days
    completed_days = sum(completion_count(h) for h in habits)
    percentage = completed_days / total_days * 100 if total_days > 0 else 0

    return {
        'totalHabits': len(habits),
        'totalDays': total_days,
        'completedDays': completed_days,
        'percentage': format_percentage(percentage),
        'bestHabit': best_habit(habits),
    }

def get_yearly_report(year, habits):
    """Build one entry per calendar month from the raw habit rows of a year."""
    report = []
    for month in range(1, 13):
        month_habits = [h for h in habits if h.get('month') == month]
        label = calendar.month_name[month]

        if not month_habits:
            report.append({
                'month': month,
                'monthLabel': label,
                'totalHabits': 0,
                'completedDays': 0,
                'percentage': 0,
            })
            continue

        total_days = len(month_habits) * days_in_month(year, month)
        completed_days = sum(completion_count(h) for h in month_habits)
        percentage = completed_days / total_days * 100 if total_days > 0 else 0
        report.append({
            'month': month,
            'monthLabel': label,
            'totalHabits': len(month_habits),
            'completedDays': completed_days,
            'percentage': format_percentage(percentage),
        })
    return report

def yearly_total_completed(report):
    return sum(m['completedDays'] for m in report)

def yearly_average(report):
    # Only months that had habits count, in both the sum and the divisor
    active = [m for m in report if m['totalHabits'] > 0]
    if not active:
        return 0
    return format_percentage(sum(float(m['percentage']) for m in active) / len(active))
