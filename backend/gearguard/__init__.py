from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from gearguard.config.settings import load_settings, SCRAP_POLICIES
from gearguard.errors import DomainError

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config.update(load_settings())

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    if app.config['SCRAP_EQUIPMENT_POLICY'] not in SCRAP_POLICIES:
        raise RuntimeError(f"SCRAP_EQUIPMENT_POLICY must be one of {SCRAP_POLICIES}")
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    from .routes.auth import auth_bp  # staff token issuance
    from .routes.requests import req_bp  # maintenance requests
    from .routes.reports import rpt_bp  # dashboard summaries
    from .routes.directory import dir_bp  # teams & staff lookups
    from .routes.admin import admin_bp  # administrative reset
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(req_bp, url_prefix='/requests')
    app.register_blueprint(rpt_bp, url_prefix='/reports')
    app.register_blueprint(dir_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')

    @app.route('/healthz')
    def health():
        database = 'connected'
        try:
            with db_engine.connect() as conn:
                conn.execute(text('SELECT 1'))
        except Exception:
            app.logger.exception('Database health check failed')
            database = 'unavailable'
        return {
            'status': 'ok' if database == 'connected' else 'degraded',
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'database': database,
        }

    @app.errorhandler(DomainError)
    def handle_domain_error(e):  # type: ignore
        app.logger.debug('Rejected %s: %s', e.code, e.detail)
        return e.to_payload(), e.status_code

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'code': type(e).__name__,
                    'detail': e.description,
                }
            }
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'code': 'InternalError',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()
