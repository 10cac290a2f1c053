"""Models package - imports all models for the application"""
from ..extensions import db

from .user import User
from .collaborator import Collaborator
from .catalog import Article, StockReceipt
from .issue import (
    Asset,
    Issue,
    IssueAsset,
    IssueLine,
    IssueRequest,
    RequestType,
    format_receipt_number,
)

__all__ = [
    'db',
    'User',
    'Collaborator',
    'Article',
    'StockReceipt',
    'RequestType',
    'IssueRequest',
    'Issue',
    'IssueLine',
    'Asset',
    'IssueAsset',
    'format_receipt_number',
]
