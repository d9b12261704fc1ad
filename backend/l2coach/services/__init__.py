"""Services module - external collaborators of the conversation engine."""

from .uploads import ImageUploader, UploadedImage
from .vision import VisionAnalyzer

__all__ = ['ImageUploader', 'UploadedImage', 'VisionAnalyzer']
