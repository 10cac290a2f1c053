from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils


class RequestType(db.Model):
    __tablename__ = 'request_type'
    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(128), nullable=False, unique=True)


class IssueRequest(db.Model):
    """Request record optionally created ahead of a withdrawal."""
    __tablename__ = 'issue_request'
    number = db.Column(db.Integer, primary_key=True, autoincrement=True)
    request_type_id = db.Column(db.Integer, db.ForeignKey('request_type.id'), nullable=False)
    description = db.Column(db.String(256), nullable=False)
    requested_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now, nullable=False)
    responsible_id = db.Column(db.String(32), nullable=True)
    requester_id = db.Column(db.String(32), nullable=True)
    destination = db.Column(db.String(128), nullable=True)

    request_type = db.relationship('RequestType')


class Issue(db.Model):
    """Withdrawal header."""
    __tablename__ = 'issue'
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    issued_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now, nullable=False)
    approver_id = db.Column(db.String(32), nullable=False, index=True)
    requester_id = db.Column(db.String(32), nullable=False, index=True)
    # Not a foreign key: external client requests are numbered outside this system.
    request_number = db.Column(db.Integer, nullable=True, index=True)
    comments = db.Column(db.Text, nullable=True)
    finalized = db.Column(db.Boolean, default=False, nullable=False)

    lines = db.relationship('IssueLine', backref='issue', lazy='dynamic')

    @property
    def receipt_number(self) -> str:
        return format_receipt_number(self.id)


class IssueLine(db.Model):
    __tablename__ = 'issue_line'
    id = db.Column(db.Integer, primary_key=True)
    issue_id = db.Column(db.Integer, db.ForeignKey('issue.id'), nullable=False, index=True)
    article_code = db.Column(db.String(32), db.ForeignKey('article.code'), nullable=False, index=True)
    quantity = db.Column(db.Float, nullable=False)
    unit_price = db.Column(db.Float, default=0.0)

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_issue_line_quantity_positive'),
    )


class Asset(db.Model):
    """Equipment/vehicle an equipment withdrawal is booked against."""
    __tablename__ = 'asset'
    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(256), nullable=False)


class IssueAsset(db.Model):
    __tablename__ = 'issue_asset'
    issue_id = db.Column(db.Integer, db.ForeignKey('issue.id'), primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset.id'), primary_key=True)


def format_receipt_number(issue_id: int | None) -> str:
    if issue_id is None:
        return ''
    return f'SA-{issue_id:04d}'
