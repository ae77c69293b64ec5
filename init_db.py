#!/usr/bin/env python
"""Database initialization script for the vocabulary image service.

Creates the vocabulary_images cache table from the SQLAlchemy models.
Managed databases should use the Alembic migration instead.

Usage:
    python init_db.py
"""

import os
import sys
from vocab_images import create_app, db


def init_database():
    """Initialize the database by creating all tables."""
    config_name = os.getenv('FLASK_ENV', 'development')
    app = create_app(config_name)

    print(f"\n{'='*60}")
    print(f"Database Initialization for {config_name.upper()} Environment")
    print(f"{'='*60}\n")

    with app.app_context():
        try:
            print(f"Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}\n")
            db.create_all()

            from vocab_images.models import VocabularyImage
            print(f"  ✓ {VocabularyImage.__tablename__:<25} - Generated illustration cache")
            print(f"    {VocabularyImage.query.count()} cached image(s)\n")

            print("Next steps:")
            print("  1. Start the Flask server: python wsgi.py")
            print("  2. Try it: POST /api/vocabulary-images {\"vocabulary\": \"xin chào\", \"language\": \"vi\"}\n")
            return True

        except Exception as e:
            print(f"❌ Error creating database: {type(e).__name__}: {e}\n")
            return False


if __name__ == '__main__':
    success = init_database()
    sys.exit(0 if success else 1)
