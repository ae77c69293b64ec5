"""Vocabulary image cache model for storing generated illustration URLs."""
from datetime import datetime
from vocab_images import db


class VocabularyImage(db.Model):
    """Cache generated images so each (word, language) pair is drawn once."""
    __tablename__ = 'vocabulary_images'

    id = db.Column(db.Integer, primary_key=True)
    vocabulary_key = db.Column(db.String(255), nullable=False, index=True)
    language = db.Column(db.String(5), nullable=False, default='vi')
    image_url = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('vocabulary_key', 'language', name='unique_vocabulary_image'),
    )

    def __repr__(self):
        return f'<VocabularyImage {self.vocabulary_key} ({self.language})>'

    def to_dict(self):
        """Convert cache entry to dictionary."""
        return {
            'id': self.id,
            'vocabulary_key': self.vocabulary_key,
            'language': self.language,
            'image_url': self.image_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
