import os
import logging
import click
from flask import Flask, jsonify
from flask_login import LoginManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash
from dotenv import load_dotenv
from models import db, User
from auth import auth, load_user_from_request
from routes import habits_bp, sleep_bp

load_dotenv()

app = Flask(__name__)

app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev_key_change_in_prod')
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('SQLALCHEMY_DATABASE_URI', 'sqlite:///db.sqlite3')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['TOKEN_MAX_AGE'] = int(os.environ.get('TOKEN_MAX_AGE', 60 * 60 * 24 * 7))  # 7 days
app.json.sort_keys = False

app.logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

db.init_app(app)
migrate = Migrate(app, db, directory=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'migrations'))

login_manager = LoginManager()
login_manager.init_app(app)

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))

@login_manager.request_loader
def load_user_from_token(request):
    return load_user_from_request(request)

@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'message': 'No valid token, authorization denied'}), 401

app.register_blueprint(auth)
app.register_blueprint(habits_bp)
app.register_blueprint(sleep_bp)

@app.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({'message': e.description}), e.code

@app.errorhandler(Exception)
def handle_unexpected_error(e):
    app.logger.exception('Unhandled error: %s', e)
    return jsonify({'message': 'Server error'}), 500

@app.route('/api/health')
def health():
    return jsonify({'status': 'ok'})

@app.cli.command('init-db')
def init_db():
    """Drop and recreate all tables."""
    db.drop_all()
    db.create_all()
    click.echo('Database initialized.')

@app.cli.command('create-user')
@click.argument('username')
@click.argument('password')
def create_user(username, password):
    """Create an account from the command line."""
    if User.query.filter_by(username=username).first():
        click.echo(f"User '{username}' already exists.")
        return
    user = User(username=username, password_hash=generate_password_hash(password, method='scrypt'))
    db.session.add(user)
    db.session.commit()
    click.echo(f"User '{username}' created.")

if __name__ == '__main__':
    logging.basicConfig(level=app.logger.level)
    app.run(debug=True)
