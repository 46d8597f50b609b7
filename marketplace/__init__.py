# marketplace/__init__.py
from flask import Flask, jsonify
from config import Config
from marketplace.extensions import db, bcrypt, login_manager, migrate, mail
from marketplace.services.errors import MarketplaceError


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    # Extensions
    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)

    # Models must be imported before the first query so every mapper is configured
    from marketplace import models  # noqa: F401

    # Blueprints
    from marketplace.routes.auth import auth as auth_blueprint
    app.register_blueprint(auth_blueprint)

    from marketplace.routes.main import main as main_blueprint
    app.register_blueprint(main_blueprint)

    from marketplace.routes.admin import admin as admin_blueprint
    app.register_blueprint(admin_blueprint, url_prefix='/admin')

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(error):
        if error.status_code >= 500:
            app.logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify({'success': False, 'error': type(error).__name__, 'message': error.message}), error.status_code

    return app
