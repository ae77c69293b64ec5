"""Routes package for the vocabulary image service."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .vocabulary_images import vocabulary_images_bp

    app.register_blueprint(vocabulary_images_bp, url_prefix='/api/vocabulary-images')
    # Path the browser client invokes the function under
    app.register_blueprint(
        vocabulary_images_bp,
        url_prefix='/functions/v1/generate-vocabulary-image',
        name='generate_vocabulary_image_function'
    )
