"""Upload media files to Cloudinary from the command line."""

__version__ = "0.1.0"
