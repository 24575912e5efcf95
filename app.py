import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config.database import Database
from config.settings import settings as default_settings
from routes.courses import courses_bp
from routes.student import student_bp
from routes.teacher import teacher_bp
from routes.users import users_bp
from services.context import ServiceContext

logger = logging.getLogger(__name__)


def create_app(settings=None, database=None, qr_encoder_factory=None, pdf_writer_factory=None):
    """Build the Flask app; tests pass their own settings and database"""
    settings = settings or default_settings
    logging.basicConfig(
        level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    app = Flask(__name__)
    CORS(app, origins=settings.CORS_ORIGINS)

    # Configuration
    app.config['SECRET_KEY'] = settings.SECRET_KEY
    app.config['MAX_CONTENT_LENGTH'] = settings.MAX_CONTENT_LENGTH

    # Initialize database
    database = database or Database(settings.MONGO_URI, settings.DB_NAME)
    database.connect()
    app.extensions['peer_eval'] = ServiceContext(
        database,
        settings,
        qr_encoder_factory=qr_encoder_factory,
        pdf_writer_factory=pdf_writer_factory,
    )

    # Register blueprints
    app.register_blueprint(courses_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(teacher_bp)
    app.register_blueprint(student_bp)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.route('/')
    def home():
        return jsonify({"message": "Peer evaluation backend is running!"})

    @app.route('/api/health')
    def health_check():
        connected = database.ping()
        return jsonify({"status": "healthy", "database": "connected" if connected else "unavailable"})

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, port=default_settings.PORT)
