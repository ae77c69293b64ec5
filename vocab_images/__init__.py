from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()

logger = logging.getLogger(__name__)

# Headers the browser client sends with function invocations
CORS_ALLOW_HEADERS = ['authorization', 'x-client-info', 'apikey', 'content-type']


def create_app(config_name='development', overrides=None):
    app = Flask(__name__)

    # Config
    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
    else:
        database_url = os.getenv('DATABASE_URL', 'sqlite:///vocab_images.db')
        # Render/Heroku style URLs
        if database_url.startswith('postgres://'):
            database_url = database_url.replace('postgres://', 'postgresql://', 1)
        app.config['SQLALCHEMY_DATABASE_URI'] = database_url

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Durable blob storage
    app.config['SUPABASE_URL'] = os.getenv('SUPABASE_URL')
    app.config['SUPABASE_SERVICE_KEY'] = os.getenv('SUPABASE_SERVICE_KEY')
    app.config['VOCABULARY_IMAGES_BUCKET'] = os.getenv('VOCABULARY_IMAGES_BUCKET', 'vocabulary-images')

    # Image generation gateway
    app.config['AI_GATEWAY_API_KEY'] = os.getenv('AI_GATEWAY_API_KEY')
    app.config['AI_GATEWAY_URL'] = os.getenv(
        'AI_GATEWAY_URL',
        'https://ai.gateway.lovable.dev/v1/chat/completions'
    )
    app.config['IMAGE_MODEL'] = os.getenv('IMAGE_MODEL', 'google/gemini-2.5-flash-image-preview')
    app.config['IMAGE_GENERATION_TIMEOUT'] = float(os.getenv('IMAGE_GENERATION_TIMEOUT', 30))

    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    db.init_app(app)
    CORS(app, origins='*', send_wildcard=True, allow_headers=CORS_ALLOW_HEADERS)

    # Create tables with error handling
    with app.app_context():
        from vocab_images import models  # noqa: F401 - register tables
        try:
            db.create_all()
        except Exception as e:
            logger.warning(f"Could not create database tables: {e}")

    # Register routes
    from vocab_images.routes import register_routes
    register_routes(app)

    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'}), 200

    return app
