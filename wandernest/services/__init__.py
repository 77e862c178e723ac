from .unsplash import UnsplashService
from .image_loader import ImageLoader, ImageTask

__all__ = [
    "UnsplashService",
    "ImageLoader",
    "ImageTask",
]
