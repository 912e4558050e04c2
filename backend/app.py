import datetime
import logging
import os

import click
from flask import Flask, current_app, jsonify
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from backend.config import config
from backend.errors import ApiError
from backend.extensions import cors, db, jwt
from backend.logger import setup_logger
from backend.models import City, Task, User

logger = logging.getLogger(__name__)

BOOTSTRAP_ADMIN_PASSWORD = 'admin123'


def create_app(config_name=None, overrides=None):
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'default')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))
    if overrides:
        app.config.update(overrides)

    setup_logger(app.config['LOG_LEVEL'], app.config.get('LOG_FILE'))

    instance_dir = os.path.join(os.path.dirname(__file__), 'instance')
    if instance_dir in app.config['SQLALCHEMY_DATABASE_URI']:
        os.makedirs(instance_dir, exist_ok=True)

    # Init
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app)

    register_jwt_handlers()
    register_error_handlers(app)

    # Blueprints
    from backend.routes.admin_routes import admin_bp
    from backend.routes.zone_routes import zone_bp
    from backend.routes.task_routes import task_bp
    from backend.routes.report_routes import report_bp
    app.register_blueprint(admin_bp, url_prefix='/api')
    app.register_blueprint(zone_bp, url_prefix='/api')
    app.register_blueprint(task_bp, url_prefix='/api')
    app.register_blueprint(report_bp, url_prefix='/api')

    @app.route('/api/health')
    def health():
        try:
            db.session.execute(text('SELECT 1'))
        except SQLAlchemyError:
            logger.exception("Database connection error")
            return jsonify({"message": "Database connection failed"}), 500
        return jsonify({"status": "Database connected", "timestamp": datetime.datetime.now().isoformat()}), 200

    register_cli_commands(app)

    # Create Tables
    with app.app_context():
        db.create_all()

    return app


def register_jwt_handlers():
    # Every token failure is a 401 with the same body shape as other errors
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"message": "Unauthorized"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"message": "Invalid token"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"message": "Token has expired"}), 401


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        db.session.rollback()
        logger.exception("Database error")
        return jsonify({"message": "Server error"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"message": "Server error"}), 500


def seed_admin(username):
    """Bootstrap account: plain text password until it is changed."""
    if User.query.filter(db.or_(User.is_seed.is_(True), User.username == username)).first():
        return False
    admin = User(
        username=username,
        password=BOOTSTRAP_ADMIN_PASSWORD,
        password_is_hashed=False,
        role='superadmin',
        zone_ref=current_app.config['ADMIN_ZONE_REF'],
        is_seed=True,
    )
    db.session.add(admin)
    db.session.commit()
    return True


def register_cli_commands(app):
    """Register CLI commands."""

    @app.cli.command("init-db")
    @click.option('--seed', is_flag=True, help="Create the bootstrap admin account.")
    def init_db_command(seed):
        """Creates database tables."""
        db.create_all()
        click.echo("Initialized the database.")
        if seed:
            username = app.config['SEED_ADMIN_USERNAME']
            if seed_admin(username):
                click.echo(f"Created admin '{username}' with the bootstrap password.")
            else:
                click.echo(f"Admin '{username}' already exists.")

    @app.cli.command("check-db")
    def check_db_command():
        """Checks the connection and prints tables and row counts."""
        click.echo(f"Database: {db.engine.url.render_as_string(hide_password=True)}")
        try:
            tables = inspect(db.engine).get_table_names()
            click.echo("Tables in database:")
            for name in tables:
                click.echo(f"- {name}")
            click.echo(f"Number of tasks in database: {Task.query.count()}")
            click.echo(f"Number of cities/zones in database: {City.query.count()}")
        except SQLAlchemyError as e:
            raise click.ClickException(f"Database connection failed: {e}")
        click.echo("Database check completed successfully.")


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'], use_reloader=False)
