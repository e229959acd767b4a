from flask import Blueprint

habits_bp = Blueprint('habits', __name__, url_prefix='/api/habits')
sleep_bp = Blueprint('sleep', __name__, url_prefix='/api/sleep')

from . import habits, sleep
