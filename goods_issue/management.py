"""
Management commands for deployment and maintenance
"""
import click
from flask.cli import with_appcontext

from .extensions import db
from .models import RequestType
from .seeders import seed_demo_data, seed_request_types


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create tables and seed the request-type catalog (local/dev only)"""
    try:
        db.create_all()
        created = seed_request_types()
        print(f"✅ Database ready ({created} request type(s) added)")
    except Exception as e:
        print(f'❌ Database initialization failed: {str(e)}')
        db.session.rollback()
        raise


@click.command('seed-demo')
@click.option('--email', default='ana.rojas@example.com', help='Login e-mail for the demo user')
@click.option('--password', default='change-me', help='Password for the demo user')
@with_appcontext
def seed_demo_command(email, password):
    """Seed demo catalog, stock, collaborators and a login"""
    try:
        seed_demo_data(admin_email=email, admin_password=password)
        print("✅ Demo data seeded")
    except Exception as e:
        print(f'❌ Demo seeding failed: {str(e)}')
        db.session.rollback()
        raise


@click.command('list-request-types')
@with_appcontext
def list_request_types_command():
    """Print the request-type catalog"""
    types = RequestType.query.order_by(RequestType.id.asc()).all()
    if not types:
        print("ℹ️  No request types found. Run 'flask init-db' first.")
        return
    for request_type in types:
        print(f"{request_type.id:>4}  {request_type.description}")


def register_commands(app):
    """Register CLI commands"""
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_demo_command)
    app.cli.add_command(list_request_types_command)
