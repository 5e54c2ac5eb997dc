from .auth import auth_bp
from .admin import admin_bp
from .collector import collector_bp
from .health import bp as health_bp

__all__ = ["auth_bp", "admin_bp", "collector_bp", "health_bp"]
