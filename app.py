"""
Staff Booking - Flask Application

Shift and appointment scheduling for a small team:
- Per-employee overlap validation for shifts and appointments
- Weekly templates expanded into concrete shifts
- Role-aware rescheduling (admins and employees)
- Day calendar with side-by-side column layout
"""

import logging

import pydantic
from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import get_config
from models import db, init_db
from auth import init_auth
from shifts_api import shifts_bp
from appointments_api import appointments_bp
from calendar_api import calendar_bp
from scheduling import SchedulingError
from scheduling.sample_data import seed_defaults

logger = logging.getLogger(__name__)


def configure_logging(level):
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    logging.getLogger().setLevel(level)


def register_error_handlers(app):
    """Every failure leaves the API as {'success': False, 'error', 'message'}."""

    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(err):
        logger.debug('%s: %s', err.code, err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(pydantic.ValidationError)
    def handle_payload_error(err):
        details = err.errors(include_url=False, include_context=False, include_input=False)
        first = details[0] if details else {}
        field = '.'.join(str(part) for part in first.get('loc', ()))
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get('msg', 'Invalid payload')
        return jsonify({
            'success': False,
            'error': 'validation_error',
            'message': message,
            'details': details
        }), 400

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(err):
        db.session.rollback()
        logger.exception('Database error')
        return jsonify({'success': False, 'error': 'database_error', 'message': 'Database error'}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        if err.code is None or err.code < 400:
            return err
        return jsonify({
            'success': False,
            'error': err.name.lower().replace(' ', '_'),
            'message': err.description
        }), err.code


def create_app(config_object=None):
    """Build the application; ``config_object`` defaults to the FLASK_ENV config."""
    app = Flask(__name__)
    app.config.from_object(config_object or get_config())

    configure_logging(app.config['LOG_LEVEL'])

    init_db(app)
    init_auth(app)

    app.register_blueprint(shifts_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(calendar_bp)

    register_error_handlers(app)

    @app.route('/api/health')
    def health():
        return jsonify({'success': True, 'status': 'ok'})

    with app.app_context():
        seed_defaults(app.config, demo=app.config['SEED_DEMO_DATA'])

    logger.debug('Application ready (%s)', app.config['SQLALCHEMY_DATABASE_URI'])
    return app


if __name__ == '__main__':
    app = create_app()

    print("\n" + "=" * 60)
    print("   STAFF BOOKING")
    print("   Shifts, appointments and team calendar")
    print("=" * 60)
    print("\n Starting server at http://localhost:5000\n")
    print(f"  Admin login: {app.config['ADMIN_EMAIL']}")
    print("\n")
    app.run(debug=True, host='0.0.0.0', port=5000)
