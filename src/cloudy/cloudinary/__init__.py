"""Cloudinary client and request signing."""

from cloudy.cloudinary.client import UploadClient, resource_type_for
from cloudy.cloudinary.signing import sign_params, string_to_sign

__all__ = ["UploadClient", "resource_type_for", "sign_params", "string_to_sign"]
