from flask import request, jsonify
from flask_login import login_required, current_user
from . import sleep_bp
from services import habit_store
from services.validation import ValidationError, check_period, clean_sleep
from utils import error_response

@sleep_bp.route('/<int:year>/<int:month>', methods=['GET'])
@login_required
def get_sleep(year, month):
    try:
        check_period(year, month)
    except ValidationError as e:
        return error_response(str(e))
    return jsonify(habit_store.find_sleep(current_user.id, year, month))

@sleep_bp.route('/<int:year>/<int:month>', methods=['POST'])
@login_required
def save_sleep(year, month):
    try:
        check_period(year, month)
        entries = clean_sleep(request.get_json(silent=True), year, month)
    except ValidationError as e:
        return error_response(str(e))
    return jsonify(habit_store.replace_sleep(current_user.id, year, month, entries))
