# app/cli.py
import time

import click
from flask.cli import AppGroup, with_appcontext
from flask_jwt_extended import create_access_token

from .extensions import db
from .model import User
from .services import notifier
from .utils.money import D


@click.command("create-user")
@click.option("--email", required=True)
@click.option("--name", required=True)
@click.option("--balance", default="0", show_default=True)
@with_appcontext
def create_user(email, name, balance):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo("Email already exists"); return
    u = User(email=email, name=name, balance=D(balance))
    db.session.add(u); db.session.commit()
    click.echo(f"User created: {u.id} {u.email}")


@click.command("issue-token")
@click.option("--user-id", type=int, required=True)
@with_appcontext
def issue_token(user_id):
    if not db.session.get(User, user_id):
        raise click.ClickException(f"user {user_id} not found")
    click.echo(create_access_token(identity=str(user_id)))


notifications_cli = AppGroup("notifications", help="Order confirmation outbox.")


@notifications_cli.command("drain")
@click.option("--limit", default=50, show_default=True)
def drain_once(limit):
    stats = notifier.drain(limit=limit)
    click.echo(f"sent={stats['sent']} retry={stats['retry']} failed={stats['failed']}")


@notifications_cli.command("worker")
@click.option("--interval", default=5.0, show_default=True, help="Seconds between drains.")
@click.option("--limit", default=50, show_default=True)
def worker(interval, limit):
    click.echo("notification worker started")
    while True:
        stats = notifier.drain(limit=limit)
        if any(stats.values()):
            click.echo(f"sent={stats['sent']} retry={stats['retry']} failed={stats['failed']}")
        time.sleep(interval)


def register_cli(app):
    app.cli.add_command(create_user)
    app.cli.add_command(issue_token)
    app.cli.add_command(notifications_cli)
