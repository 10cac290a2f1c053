from ..extensions import db


class Collaborator(db.Model):
    """Directory entry for people who approve or physically receive goods.

    ``authorized`` partitions the directory: authorized collaborators may approve
    a withdrawal, everyone else may only receive one. ``employed`` mirrors the
    employment condition; former/external staff (``employed`` false) are still
    listed as receivers.
    """
    __tablename__ = 'collaborator'
    identification = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(128), nullable=True)
    alias = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(120), nullable=True, index=True)
    authorized = db.Column(db.Boolean, default=False, nullable=False)
    employed = db.Column(db.Boolean, default=True, nullable=False)

    @property
    def display_name(self) -> str:
        return self.name or self.alias or self.identification

    def to_dict(self):
        return {
            'identification': self.identification,
            'name': self.display_name,
            'alias': self.alias or self.display_name,
            'authorized': bool(self.authorized),
        }

    def __repr__(self):
        return f'<Collaborator {self.identification}>'
