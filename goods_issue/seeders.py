"""Reference and demo data for goods issue forms."""
import logging

from .extensions import db
from .models import Article, Asset, Collaborator, RequestType, StockReceipt, User

logger = logging.getLogger(__name__)

# id 1 doubles as the fallback when a form's request-type code matches nothing.
REQUEST_TYPES = [
    (1, 'general'),
    (2, 'articulos_oficina'),
    (3, 'herramienta'),
    (4, 'limpieza'),
    (5, 'vestimenta'),
    (6, 'equipo'),
    (7, 'sin_asignacion'),
    (8, 'prestamo'),
]

DEMO_ARTICLES = [
    # code, name, brand, unit, unit_price, received
    ('OF-001', 'Bond paper A4', 'Navigator', 'Ream', 4.5, 40),
    ('OF-002', 'Blue ballpoint pen', None, 'UND', 0.35, 200),
    ('TL-001', 'Claw hammer', 'Stanley', 'UND', 12.0, 6),
    ('CL-001', 'Liquid detergent', 'Clorox', 'Gallon', 7.25, 15),
    ('UN-001', 'Work boots', None, 'Pair', 38.0, 10),
    ('EQ-001', 'Hydraulic oil', 'Shell', 'Liter', 9.8, 50),
]

DEMO_COLLABORATORS = [
    # identification, name, alias, email, authorized, employed
    ('A100', 'Ana Rojas', 'arojas', 'ana.rojas@example.com', True, True),
    ('A200', 'Luis Mora', 'lmora', 'luis.mora@example.com', True, True),
    ('R300', 'Carla Vega', 'cvega', None, False, False),
    ('R400', None, 'jsolis', None, False, False),
]

DEMO_ASSETS = [
    (1, 'Forklift FL-02'),
    (2, 'Delivery truck CR-118'),
]


def seed_request_types():
    created = 0
    for type_id, description in REQUEST_TYPES:
        if db.session.get(RequestType, type_id) is None:
            db.session.add(RequestType(id=type_id, description=description))
            created += 1
    db.session.commit()
    logger.info("Seeded %s request type(s)", created)
    return created


def seed_demo_data(admin_email='ana.rojas@example.com', admin_password='change-me'):
    """Idempotent demo catalog, stock, collaborators, assets and one login."""
    seed_request_types()

    for code, name, brand, unit, price, received in DEMO_ARTICLES:
        if db.session.get(Article, code) is None:
            db.session.add(Article(code=code, name=name, brand=brand, unit=unit, unit_price=price))
            db.session.add(StockReceipt(article_code=code, quantity=received, notes='Opening stock'))

    for identification, name, alias, email, authorized, employed in DEMO_COLLABORATORS:
        if db.session.get(Collaborator, identification) is None:
            db.session.add(Collaborator(
                identification=identification,
                name=name,
                alias=alias,
                email=email,
                authorized=authorized,
                employed=employed,
            ))

    for asset_id, description in DEMO_ASSETS:
        if db.session.get(Asset, asset_id) is None:
            db.session.add(Asset(id=asset_id, description=description))

    if admin_email and User.query.filter_by(email=admin_email).first() is None:
        user = User(username=admin_email.split('@')[0], email=admin_email)
        user.set_password(admin_password)
        db.session.add(user)

    db.session.commit()
    logger.info("Demo data seeded")
