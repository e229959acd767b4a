from utils import SLEEP_HOURS, parse_day

class ValidationError(ValueError):
    pass

def check_period(year, month=None):
    if year < 1 or year > 9999:
        raise ValidationError('Invalid year')
    if month is not None and (month < 1 or month > 12):
        raise ValidationError('Invalid month')

def clean_habits(payload, year, month):
    """Validate a POST /habits body and return [{name, completions}] ready for the store."""
    if not isinstance(payload, dict) or not isinstance(payload.get('habits'), list):
        raise ValidationError('habits must be a list')

    cleaned = []
    for index, habit in enumerate(payload['habits']):
        if not isinstance(habit, dict):
            raise ValidationError(f'habits[{index}] must be an object')

        name = habit.get('name')
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f'habits[{index}].name is required')
        if len(name.strip()) > 200:
            raise ValidationError(f'habits[{index}].name is too long')

        completions = habit.get('completions')
        if completions is None:
            completions = {}
        if not isinstance(completions, dict):
            raise ValidationError(f'habits[{index}].completions must be an object')

        days = {}
        for key, value in completions.items():
            day = parse_day(key, year, month)
            if day is None:
                raise ValidationError(f'habits[{index}].completions has invalid day {key!r}')
            if value is True:
                days[str(day)] = True
            elif value is not False:
                raise ValidationError(f'habits[{index}].completions[{key!r}] must be a boolean')
            # false entries are never stored

        cleaned.append({'name': name.strip(), 'completions': days})
    return cleaned

def clean_sleep(payload, year, month):
    if isinstance(payload, dict) and 'sleep' in payload:
        payload = payload['sleep']
    if not isinstance(payload, dict):
        raise ValidationError('sleep must be an object')

    entries = {}
    for key, hours in payload.items():
        day = parse_day(key, year, month)
        if day is None:
            raise ValidationError(f'sleep has invalid day {key!r}')
        if isinstance(hours, bool) or not isinstance(hours, (int, float)) or hours not in SLEEP_HOURS:
            raise ValidationError(f'sleep[{key!r}] must be one of {", ".join(str(h) for h in SLEEP_HOURS)}')
        entries[str(day)] = hours
    return entries
