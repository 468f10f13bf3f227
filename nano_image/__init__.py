"""nano-image-functions: serverless image + prompt -> Gemini image generation."""

__version__ = "0.1.0"
