from flask import request, jsonify
from flask_login import login_required, current_user
from . import habits_bp
from services import habit_store
from services.validation import ValidationError, check_period, clean_habits
from utils import error_response

@habits_bp.route('/<int:year>/<int:month>', methods=['GET'])
@login_required
def get_habits(year, month):
    try:
        check_period(year, month)
    except ValidationError as e:
        return error_response(str(e))

    habits = habit_store.find(current_user.id, year, month)
    return jsonify([h.to_dict() for h in habits])

@habits_bp.route('/<int:year>/<int:month>', methods=['POST'])
@login_required
def save_habits(year, month):
    try:
        check_period(year, month)
        habits = clean_habits(request.get_json(silent=True), year, month)
    except ValidationError as e:
        return error_response(str(e))

    created = habit_store.replace_all(current_user.id, year, month, habits)
    return jsonify([h.to_dict() for h in created])

@habits_bp.route('/report/<int:year>', methods=['GET'])
@login_required
def yearly_report(year):
    try:
        check_period(year)
    except ValidationError as e:
        return error_response(str(e))

    # Raw rows; the client aggregates per month
    habits = habit_store.find_by_year(current_user.id, year)
    return jsonify([h.to_dict() for h in habits])
