"""Administrative command line interface for the travel planner backend."""

from __future__ import annotations

import click
from sqlalchemy import func, inspect

from travel_planner import create_app, db
from travel_planner.errors import AccountConflict
from travel_planner.models import Profile, User
from travel_planner.repositories.profiles import mark_stale_profiles_offline
from travel_planner.repositories.users import create_user
from travel_planner.utils.public_id import assign_public_id, is_public_id

app = None


def get_app():
    global app
    if app is None:
        app = create_app()
    return app


def _find_user(username: str):
    username = username.strip().lower()
    return User.query.filter(func.lower(User.username) == username).first()


@click.group()
def cli():
    """Utilities for managing the travel planner database and users."""


@cli.command("init-db")
def init_db():
    """Create all tables that do not exist yet."""
    with get_app().app_context():
        db.create_all()
        click.secho("Database tables created", fg="green")


@cli.command("add-user")
@click.option("--username", required=True, help="Username (e.g. jdoe)")
@click.option("--email", required=True, help="Email address")
@click.option("--password", required=True, help="Password for the new account")
@click.option("--full-name", required=False, help="Full name shown on the profile")
def add_user(username: str, email: str, password: str, full_name: str | None):
    """Create a new user together with its profile."""
    with get_app().app_context():
        try:
            user = create_user(email.strip().lower(), username, password, full_name=full_name)
        except AccountConflict as exc:
            raise click.ClickException(str(exc))
        click.secho(f"User '{user.username}' created with public id {user.profile.public_id}", fg="green")


@cli.command("set-password")
@click.option("--username", required=True, help="Existing username")
@click.option("--password", required=True, help="New password")
def set_password(username: str, password: str):
    """Update a user's password."""
    with get_app().app_context():
        user = _find_user(username)
        if not user:
            raise click.ClickException(f"User '{username}' was not found")
        user.set_password(password)
        db.session.commit()
        click.secho(f"Password updated for '{user.username}'", fg="green")


@cli.command("list-tables")
def list_tables():
    with get_app().app_context():
        for name in sorted(inspect(db.engine).get_table_names()):
            click.echo(name)


@cli.command("list-indexes")
@click.argument("table")
def list_indexes(table: str):
    """Print the indexes defined on TABLE."""
    with get_app().app_context():
        inspector = inspect(db.engine)
        if table not in inspector.get_table_names():
            raise click.ClickException(f"Table '{table}' does not exist")
        indexes = inspector.get_indexes(table)
        if not indexes:
            click.echo("No indexes")
        for index in indexes:
            unique = " UNIQUE" if index.get("unique") else ""
            click.echo(f"{index['name']}{unique} ({', '.join(c for c in index['column_names'] if c)})")


@cli.command("inspect-constraints")
@click.argument("table")
def inspect_constraints(table: str):
    """Print primary key, unique and foreign key constraints of TABLE."""
    with get_app().app_context():
        inspector = inspect(db.engine)
        if table not in inspector.get_table_names():
            raise click.ClickException(f"Table '{table}' does not exist")
        pk = inspector.get_pk_constraint(table)
        click.echo(f"PRIMARY KEY ({', '.join(pk.get('constrained_columns') or [])})")
        for constraint in inspector.get_unique_constraints(table):
            click.echo(f"UNIQUE {constraint.get('name') or ''} ({', '.join(constraint['column_names'])})")
        for fk in inspector.get_foreign_keys(table):
            click.echo(
                f"FOREIGN KEY ({', '.join(fk['constrained_columns'])}) -> "
                f"{fk['referred_table']}({', '.join(fk['referred_columns'])})"
            )


@cli.command("check-public-ids")
def check_public_ids():
    """Report profiles with missing, malformed or duplicated public ids."""
    with get_app().app_context():
        missing = Profile.query.filter(Profile.public_id.is_(None)).count()
        invalid = [
            profile.id
            for profile in Profile.query.filter(Profile.public_id.isnot(None)).all()
            if not is_public_id(profile.public_id)
        ]
        duplicates = (
            db.session.query(Profile.public_id, func.count(Profile.id))
            .filter(Profile.public_id.isnot(None))
            .group_by(Profile.public_id)
            .having(func.count(Profile.id) > 1)
            .all()
        )
        click.echo(f"Missing public ids: {missing}")
        click.echo(f"Invalid public ids: {len(invalid)}")
        for profile_id in invalid:
            click.echo(f"  {profile_id}")
        click.echo(f"Duplicated public ids: {len(duplicates)}")
        for public_id, count in duplicates:
            click.echo(f"  {public_id} x{count}")
        if missing or invalid or duplicates:
            raise click.ClickException("Public id check failed")
        click.secho("All public ids are valid", fg="green")


@cli.command("backfill-public-ids")
def backfill_public_ids():
    """Assign fresh public ids to profiles that lack a valid one."""
    with get_app().app_context():
        updated = 0
        for profile in Profile.query.all():
            if is_public_id(profile.public_id):
                continue
            assign_public_id(profile)
            updated += 1
        db.session.commit()
        click.secho(f"Backfilled {updated} profile(s)", fg="green")


@cli.command("presence-sweep")
@click.option("--timeout", type=int, default=None, help="Seconds without a heartbeat before going offline")
def presence_sweep(timeout: int | None):
    """Mark profiles offline when their heartbeat has gone stale."""
    flask_app = get_app()
    with flask_app.app_context():
        seconds = timeout or flask_app.config["PRESENCE_TIMEOUT_SECONDS"]
        stale_ids = mark_stale_profiles_offline(seconds)
        click.echo(f"Marked {len(stale_ids)} profile(s) offline")


@cli.command("verify-username-slug")
def verify_username_slug():
    """Deprecated: username slugs were replaced by public ids."""
    click.secho(
        "verify-username-slug is deprecated: profiles are addressed by 8-digit public ids. Nothing to do.",
        fg="yellow",
    )


if __name__ == "__main__":
    cli()
