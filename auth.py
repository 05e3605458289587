"""Authentication routes for login and logout, and the caller identity helpers."""

from datetime import datetime
from flask import Blueprint, jsonify, request
from flask_login import LoginManager, login_user, logout_user, login_required, current_user

from models import db, User
from db_service import get_user_by_email
from schemas import LoginIn
from scheduling import CallerIdentity, identity_from_user

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'error': 'unauthorized', 'message': 'Unauthorized'}), 401


def init_auth(app):
    """Attach the login manager and auth routes to the app."""
    login_manager.init_app(app)
    app.register_blueprint(auth_bp)


def current_caller() -> CallerIdentity:
    """The logged-in user as the scheduler sees them."""
    return identity_from_user(current_user)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Handle user login."""
    payload = LoginIn.parse(request.get_json(silent=True))

    user = get_user_by_email(payload.email)

    if user and user.check_password(payload.password):
        if not user.is_active:
            return jsonify({'success': False, 'error': 'forbidden', 'message': 'Account is deactivated.'}), 403

        login_user(user, remember=payload.remember)
        user.last_login = datetime.utcnow()
        db.session.commit()

        return jsonify({
            'success': True,
            'user': user.to_dict(),
            'message': 'Logged in successfully!'
        })

    return jsonify({'success': False, 'error': 'unauthorized', 'message': 'Invalid email or password.'}), 401


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Log out the current user."""
    logout_user()
    return jsonify({'success': True, 'message': 'You have been logged out.'})


@auth_bp.route('/me')
@login_required
def me():
    """Get the current logged-in user's information."""
    user = current_user
    return jsonify({
        'success': True,
        'user': user.to_dict(),
        'employee': user.linked_employee.to_dict() if user.linked_employee else None
    })
