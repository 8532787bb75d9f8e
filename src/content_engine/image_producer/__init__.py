# Image Producer — fal.ai featured image generation
from .fal import FalImageProducer

__all__ = ["FalImageProducer"]
