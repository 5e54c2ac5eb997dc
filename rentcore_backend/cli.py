# rentcore_backend/cli.py
import click

from .extensions import db
from .models import Profile
from .security import ROLES


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.argument("password")
    @click.option("--role", type=click.Choice(ROLES), default="collector", show_default=True)
    @click.option("--name", "full_name", default="", help="Display name")
    def create_user(email, password, role, full_name):
        """Create or update a login (upsert by e-mail)."""
        email = email.strip().lower()
        u = db.session.query(Profile).filter_by(email=email).first()
        if not u:
            u = Profile(email=email)
            db.session.add(u)
        u.role = role
        u.full_name = full_name or u.full_name or ""
        u.is_approved = True
        u.set_password(password)
        db.session.commit()
        click.echo(f"User upserted: {u.id} {u.email} ({u.role})")
