import logging
from dataclasses import dataclass

from flask import Flask, current_app
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()
bcrypt = Bcrypt()

logger = logging.getLogger(__name__)


@dataclass
class Services:
    credentials: "CredentialStore"
    sessions: "SessionIssuer"
    catalog: "SkillCatalog"
    categories: "CategoryIndex"
    requests: "RequestEngine"
    profiles: "ProfileStore"


def get_services():
    """Stores wired up by ``create_app`` for the current application."""
    return current_app.extensions['skillswap']


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object('skillswap.config.Config')
    if config_overrides:
        app.config.update(config_overrides)

    if not app.config.get('JWT_SECRET_KEY'):
        raise RuntimeError("JWT_SECRET_KEY is not set; refusing to start without a token signing secret")
    if not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = app.config['JWT_SECRET_KEY']

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Authorization", "Content-Type"],
        }
    })

    from skillswap.auth import SessionIssuer
    from skillswap.errors import register_error_handlers
    from skillswap.exchange_requests import RequestEngine
    from skillswap.skills import CategoryIndex, SkillCatalog
    from skillswap.users import CredentialStore, ProfileStore

    catalog = SkillCatalog(db)
    app.extensions['skillswap'] = Services(
        credentials=CredentialStore(db, bcrypt),
        sessions=SessionIssuer(app.config['JWT_SECRET_KEY'], app.config['TOKEN_TTL_DAYS']),
        catalog=catalog,
        categories=CategoryIndex(db),
        requests=RequestEngine(db, catalog),
        profiles=ProfileStore(db),
    )

    # Create tables if they don't exist
    with app.app_context():
        create_tables()

    register_error_handlers(app)

    # Import and register Blueprints
    from skillswap.auth_routes import auth_bp
    from skillswap.category_routes import category_bp
    from skillswap.dashboard_routes import dashboard_bp
    from skillswap.profile_routes import profile_bp
    from skillswap.request_routes import request_bp
    from skillswap.skill_routes import skill_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(skill_bp, url_prefix='/api/skills')
    app.register_blueprint(request_bp, url_prefix='/api/requests')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
    app.register_blueprint(category_bp, url_prefix='/api/categories')
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')

    return app


def configure_logging(app):
    level = app.config.get('LOG_LEVEL', 'INFO')
    if isinstance(level, str):
        level = level.upper()
    package_logger = logging.getLogger('skillswap')
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        package_logger.addHandler(handler)


def create_tables():
    from skillswap import models  # noqa: F401  registers the tables on db.metadata

    try:
        db.create_all()
    except Exception:
        logger.exception("Failed to initialize database")
        raise
    logger.info("Database initialized successfully")


def shutdown(app):
    """Close every pooled database connection."""
    with app.app_context():
        db.engine.dispose()
    logger.info("Database connections closed")
