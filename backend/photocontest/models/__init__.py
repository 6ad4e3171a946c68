from photocontest.models.category import Category
from photocontest.models.competition import Competition
from photocontest.models.photo import Photo
from photocontest.models.report import Report
from photocontest.models.vote import Vote

__all__ = [
    'Category',
    'Competition',
    'Photo',
    'Report',
    'Vote',
]
