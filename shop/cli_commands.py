"""
Flask CLI commands for database management.

Commands:
- flask init-db: Create the tables
- flask drop-db: Drop the tables (asks for confirmation)
"""

import click
from flask import current_app

from shop.database import create_tables, drop_tables


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create the customer table."""
        engine = current_app.extensions.get('db_engine')
        if engine is None:
            click.echo(click.style('❌ No SQL database configured for this app.', fg='red'))
            return
        create_tables(engine)
        click.echo(click.style('✅ Tables created', fg='green', bold=True))

    @app.cli.command('drop-db')
    @click.confirmation_option(prompt='This deletes every customer. Continue?')
    def drop_db_command():
        """Drop the customer table."""
        engine = current_app.extensions.get('db_engine')
        if engine is None:
            click.echo(click.style('❌ No SQL database configured for this app.', fg='red'))
            return
        drop_tables(engine)
        click.echo(click.style('✅ Tables dropped', fg='yellow', bold=True))
