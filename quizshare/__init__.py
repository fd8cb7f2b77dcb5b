from flask import Flask, redirect, url_for, request, jsonify, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager, current_user
from dotenv import load_dotenv
from flask_migrate import Migrate
from flask_compress import Compress

# Load environment variables early so config is available for blueprint creation
load_dotenv()

from quizshare.config import config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
compress = Compress()


def create_app(overrides: dict | None = None) -> Flask:
    """
    Application factory for the Flask app.
    Loads environment variables, configures the database,
    and registers blueprints.

    ``overrides`` is applied on top of the environment configuration
    before extensions are initialised (used by the test suite).
    """
    # Re-initialize config to ensure latest .env values are loaded
    from quizshare.config import Config
    global config
    config = Config()

    # Validate configuration
    config.validate()

    app = Flask(__name__)

    # Load configuration from config module
    app.config["SECRET_KEY"] = config.SECRET_KEY
    app.config["SQLALCHEMY_DATABASE_URI"] = config.SQLALCHEMY_DATABASE_URI
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = config.SQLALCHEMY_TRACK_MODIFICATIONS
    app.config["SQLALCHEMY_ECHO"] = config.SQLALCHEMY_ECHO
    app.config["APP_BASE_URL"] = config.APP_BASE_URL
    app.config["MIN_PASSWORD_LENGTH"] = config.MIN_PASSWORD_LENGTH
    app.config["RATELIMIT_ENABLED"] = config.RATELIMIT_ENABLED
    app.config["LOGIN_RATE_LIMIT"] = config.LOGIN_RATE_LIMIT
    app.config["LOGIN_RATE_WINDOW_SECONDS"] = config.LOGIN_RATE_WINDOW_SECONDS
    app.config["SUBMIT_RATE_LIMIT"] = config.SUBMIT_RATE_LIMIT
    app.config["SUBMIT_RATE_WINDOW_SECONDS"] = config.SUBMIT_RATE_WINDOW_SECONDS
    app.config["MSG_REGISTER_SUCCESS"] = config.MSG_REGISTER_SUCCESS
    app.config["MSG_LOGIN_SUCCESS"] = config.MSG_LOGIN_SUCCESS
    app.config["MSG_LOGOUT_SUCCESS"] = config.MSG_LOGOUT_SUCCESS
    app.config["MSG_STORE_FAILURE"] = config.MSG_STORE_FAILURE

    # Response compression settings
    app.config["COMPRESS_MIMETYPES"] = [
        'application/json', 'text/csv'
    ]
    app.config["COMPRESS_LEVEL"] = 6
    app.config["COMPRESS_MIN_SIZE"] = 500
    app.config["SESSION_COOKIE_SECURE"] = config.SESSION_COOKIE_SECURE
    app.config["SESSION_COOKIE_HTTPONLY"] = config.SESSION_COOKIE_HTTPONLY
    app.config["SESSION_COOKIE_SAMESITE"] = config.SESSION_COOKIE_SAMESITE

    if overrides:
        app.config.update(overrides)

    # Connection pooling only applies to the MySQL backend
    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("mysql"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "max_overflow": 20,
            "connect_args": {
                "connect_timeout": 5,
                "charset": "utf8mb4",
            }
        }

    app.logger.setLevel(config.LOG_LEVEL)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    compress.init_app(app)

    # Initialize security features
    from quizshare.security import init_security
    init_security(app)

    @login_manager.user_loader
    def load_user(user_id):
        from quizshare.auth.models import User
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Authentication required'}), 401

    @app.route("/")
    def index():
        if current_user.is_authenticated:
            return redirect(url_for('quiz.list_quizzes'))
        return jsonify({
            "status": "ok",
            "message": "Quizshare API is running",
        }), 200

    @app.route("/quiz/<quiz_id>")
    def share_link_target(quiz_id):
        """Shared quiz links resolve to the public quiz payload."""
        return redirect(url_for('quiz.get_quiz_for_taking', quiz_id=quiz_id))

    # Register blueprints
    from quizshare.auth import auth_bp
    app.register_blueprint(auth_bp)

    from quizshare.quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    # Custom error handler for API routes to return JSON instead of HTML
    @app.errorhandler(404)
    def handle_404(e):
        """Handle 404 errors - return JSON for API routes, plain text for others."""
        path = request.path
        method = request.method
        current_app.logger.warning(f"404 error: {method} {path}")
        if '/api/' in path:
            return jsonify({
                'success': False,
                'error': f'Route not found: {method} {path}',
                'path': path,
                'method': method
            }), 404
        return f"Page not found: {path}", 404

    @app.errorhandler(405)
    def handle_405(e):
        """Handle 405 Method Not Allowed - return JSON for API routes."""
        path = request.path
        method = request.method
        current_app.logger.warning(f"405 error: {method} {path}")
        if '/api/' in path:
            return jsonify({
                'success': False,
                'error': f'Method not allowed: {method} {path}',
                'path': path,
                'method': method
            }), 405
        return e

    # Create tables if they do not exist
    with app.app_context():
        from quizshare.auth.models import User  # noqa: F401
        from quizshare.quiz.models import Quiz, Question, Response  # noqa: F401
        db.create_all()

    return app
