"""
Flask CLI commands: `flask --app app init-db`, `seed`, `reset-content`, `media-orphans`.
"""
import click
from flask import current_app
from flask.cli import with_appcontext

from steelbuckle.errors import ApiError
from steelbuckle.extensions import db


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_command)
    app.cli.add_command(reset_content_command)
    app.cli.add_command(media_orphans_command)


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create missing tables."""
    db.create_all()
    click.echo("Database tables created.")


@click.command("seed")
@with_appcontext
def seed_command():
    """Load the default content (idempotent)."""
    from steelbuckle.utils.seed import seed_content

    result = seed_content()
    current_app.extensions["translation_store"].invalidate()
    click.echo(f"Seeded {result['translations']} translations and {result['media']} media assets.")


@click.command("reset-content")
@with_appcontext
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def reset_content_command(yes):
    """Delete all site content and restore the defaults. Users and languages are kept."""
    from steelbuckle.utils.db_reset import reset_content

    if not yes:
        click.confirm("This deletes every translation, media record, project and SEO entry. Continue?", abort=True)
    try:
        reset_content()
    except ApiError as e:
        raise click.ClickException(f"{e.message} (stage: {e.extra.get('stage')})")
    click.echo("Content reset to defaults.")


@click.command("media-orphans")
@with_appcontext
def media_orphans_command():
    """List remote media with no local record. Nothing is deleted."""
    from steelbuckle.utils.media_host import find_orphaned_assets

    host = current_app.extensions["media_host"]
    try:
        orphans = find_orphaned_assets(host, current_app.config.get("MEDIA_FOLDER", "media"))
    except ApiError as e:
        raise click.ClickException(e.message)
    for public_id in orphans:
        click.echo(public_id)
    click.echo(f"{len(orphans)} orphaned asset(s).", err=True)
