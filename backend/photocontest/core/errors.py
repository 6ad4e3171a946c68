"""Business-rule errors shared by the submission, voting and moderation services.

Every expected failure of a core operation is one of these. Messages are safe to
show to end users verbatim; the transport layer maps ``status_code`` and
``kind`` onto the response.
"""

from __future__ import annotations


class ContestError(Exception):
    kind = 'error'
    status_code = 400
    default_message = 'Request could not be completed'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ContestError):
    kind = 'not_found'
    status_code = 404


class QuotaExceededError(ContestError):
    kind = 'quota_exceeded'
    status_code = 400


class InvalidStateError(ContestError):
    kind = 'invalid_state'
    status_code = 409


class ConflictError(ContestError):
    kind = 'conflict'
    status_code = 409


class ForbiddenError(ContestError):
    kind = 'forbidden'
    status_code = 403


class ValidationFailedError(ContestError):
    kind = 'validation'
    status_code = 400


class CompetitionNotFound(NotFoundError):
    default_message = 'Competition not found'


class CategoryNotFound(NotFoundError):
    default_message = 'Category not found'


class PhotoNotFound(NotFoundError):
    default_message = 'Photo not found'


class ReportNotFound(NotFoundError):
    default_message = 'Report not found'


class SubmissionLimitExceeded(QuotaExceededError):
    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f'Maximum {limit} photos allowed for this category')


class CompetitionNotActive(InvalidStateError):
    default_message = 'Competition is not currently active'


class PhotoNotApproved(InvalidStateError):
    default_message = 'Photo must be approved before voting'


class PhotoAlreadyModerated(InvalidStateError):
    default_message = 'Photo has already been moderated'


class PhotoNotEditable(InvalidStateError):
    default_message = 'Cannot change photos that have been moderated'


class ReportAlreadyResolved(InvalidStateError):
    default_message = 'Report has already been resolved'


class InvalidStatusTransition(InvalidStateError):
    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f'Cannot move competition from {current} to {requested}')


class AlreadyVoted(ConflictError):
    default_message = 'You have already voted on this photo'


class CannotVoteOwnPhoto(ConflictError):
    default_message = 'You cannot vote on your own photo'


class AlreadyReported(ConflictError):
    default_message = 'You have already reported this photo'


class NotPhotoOwner(ForbiddenError):
    default_message = 'You can only change your own photos'


class AdminRequired(ForbiddenError):
    default_message = 'You must be an admin to access this resource'


class InvalidFileType(ValidationFailedError):
    default_message = 'Only JPEG and PNG files are allowed'


class FileTooLarge(ValidationFailedError):
    default_message = 'File size cannot exceed 10MB'


class ReasonRequired(ValidationFailedError):
    default_message = 'A reason is required for this action'


class InvalidCompetitionDates(ValidationFailedError):
    default_message = 'Competition end date must be after its start date'
