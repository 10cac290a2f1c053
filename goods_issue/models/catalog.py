from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils


class Article(db.Model):
    """Catalog master record for an issuable article."""
    __tablename__ = 'article'
    code = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(256), nullable=False, index=True)
    brand = db.Column(db.String(128), nullable=True)
    unit = db.Column(db.String(32), nullable=True)
    unit_price = db.Column(db.Float, default=0.0)
    image_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now)

    receipts = db.relationship('StockReceipt', backref='article', lazy='dynamic')

    def __repr__(self):
        return f'<Article {self.code}>'


class StockReceipt(db.Model):
    """Incoming stock. Available quantity is received minus issued."""
    __tablename__ = 'stock_receipt'
    id = db.Column(db.Integer, primary_key=True)
    article_code = db.Column(db.String(32), db.ForeignKey('article.code'), nullable=False, index=True)
    quantity = db.Column(db.Float, nullable=False)
    received_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now)
    notes = db.Column(db.Text, nullable=True)

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_stock_receipt_quantity_positive'),
    )
