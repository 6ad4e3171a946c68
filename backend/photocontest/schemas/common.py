from __future__ import annotations

from enum import Enum


class CompetitionStatus(str, Enum):
    draft = 'draft'
    open = 'open'
    voting = 'voting'
    closed = 'closed'


class PhotoStatus(str, Enum):
    pending = 'pending'
    approved = 'approved'
    rejected = 'rejected'


class ReportReason(str, Enum):
    inappropriate = 'inappropriate'
    spam = 'spam'
    offensive = 'offensive'
    copyright = 'copyright'
    other = 'other'


class ReportStatus(str, Enum):
    pending = 'pending'
    resolved = 'resolved'
    dismissed = 'dismissed'


class PhotoAction(str, Enum):
    approve = 'approve'
    reject = 'reject'
    delete = 'delete'


class ReportResolution(str, Enum):
    resolved = 'resolved'
    dismissed = 'dismissed'


class PhotoSort(str, Enum):
    votes = 'votes'
    date = 'date'
    title = 'title'


class SortOrder(str, Enum):
    asc = 'asc'
    desc = 'desc'


class UserRole(str, Enum):
    user = 'user'
    admin = 'admin'
