import logging

from flask import Flask
from flask_cors import CORS

from ai_classifier import create_classifier
from auth import auth_bp
from config import Config
from errors import register_error_handlers
from models import db, init_db
from routes import api_bp


def create_app(config_object=None, classifier=None):
    """Application factory; `classifier` replaces the configured backend"""
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    CORS(app)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize database
    db.init_app(app)
    init_db(app)

    app.extensions['food_classifier'] = classifier or create_classifier(app.config)

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    register_error_handlers(app)

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables"""
        db.create_all()
        print("✓ Database tables created")

    return app


# Run the application
if __name__ == '__main__':
    app = create_app()

    print("\n" + "="*60)
    print("🚀 FOOD DONATION PLATFORM")
    print("="*60)
    print(f"📊 Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
    print(f"🤖 Classifier: {type(app.extensions['food_classifier']).__name__}")
    print("🌐 API: http://localhost:5000")
    print("\n📋 Available Endpoints:")
    print("  POST   /auth/register         - Create an account")
    print("  POST   /auth/login            - Get an API token")
    print("  GET    /food-listings         - List donations (?id=, ?search=, ?status=)")
    print("  POST   /food-listings         - Create new donation")
    print("  PUT    /food-listings?id=     - Reserve / complete a donation")
    print("  DELETE /food-listings?id=     - Delete a donation")
    print("  POST   /ai-food-analysis      - Analyze a food image")
    print("  GET    /ai-food-analysis      - Scan history")
    print("  GET    /impact-metrics        - Impact metrics (?period=today|week|month)")
    print("\n✅ Ready! Press Ctrl+C to stop")
    print("="*60 + "\n")

    app.run(debug=True, port=5000, use_reloader=False)
