from flask import Blueprint

# Sub-blueprints with RELATIVE prefixes (nested under /api)
from serenity_core.api.chat import bp as chat_bp
from serenity_core.api.moods import bp as moods_bp
from serenity_core.api.users import bp as users_bp

api = Blueprint("api", __name__, url_prefix="/api")

api.register_blueprint(moods_bp)
api.register_blueprint(users_bp)
api.register_blueprint(chat_bp)

# Note: the experience blueprint is mounted at the site root (/experience/...)
