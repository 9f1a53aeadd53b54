"""
Error types raised by the blending service.
"""


class BlendError(Exception):
	"""Base class for all errors raised by blend_api."""
	pass


class PreconditionError(BlendError, ValueError):
	"""Inputs violate the blend contract: mismatched sizes, non-positive gamma or zero total weight."""
	pass


class ImageDecodeError(BlendError):
	"""A file could not be decoded as an image."""
	pass


class JobNotFoundError(BlendError):
	"""No finished result exists for the requested job id."""
	pass
