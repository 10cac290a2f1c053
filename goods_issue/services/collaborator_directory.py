from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import func, or_

from ..models import Collaborator

logger = logging.getLogger(__name__)


@dataclass
class DirectorySnapshot:
    """Collaborators split into who may approve and who may only receive."""
    approvers: List[Collaborator] = field(default_factory=list)
    receivers: List[Collaborator] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[dict]]:
        return {
            'approvers': [c.to_dict() for c in self.approvers],
            'receivers': [c.to_dict() for c in self.receivers],
        }


class CollaboratorDirectory:
    @staticmethod
    def fetch() -> List[Collaborator]:
        """Authorized collaborators plus everyone flagged as not employed."""
        return (
            Collaborator.query.filter(
                or_(Collaborator.authorized.is_(True), Collaborator.employed.is_(False))
            )
            .order_by(Collaborator.name.asc(), Collaborator.identification.asc())
            .all()
        )

    @staticmethod
    def partition(collaborators: Optional[List[Collaborator]] = None) -> DirectorySnapshot:
        if collaborators is None:
            collaborators = CollaboratorDirectory.fetch()
        snapshot = DirectorySnapshot()
        for collaborator in collaborators:
            if collaborator.authorized:
                snapshot.approvers.append(collaborator)
            else:
                snapshot.receivers.append(collaborator)
        return snapshot

    @staticmethod
    def match_by_email(email: Optional[str]) -> Optional[Collaborator]:
        """Case-insensitive match of the signed-in user's e-mail to an approver."""
        normalized = (email or '').strip().lower()
        if not normalized:
            return None
        match = (
            Collaborator.query.filter(
                func.lower(Collaborator.email) == normalized,
                Collaborator.authorized.is_(True),
            )
            .first()
        )
        if match is None:
            logger.debug("No authorized collaborator matches the current user's e-mail")
        return match

    @staticmethod
    def resolve_approver_id(email: Optional[str]) -> str:
        match = CollaboratorDirectory.match_by_email(email)
        return match.identification if match else ''
