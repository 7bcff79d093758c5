"""
Error types raised at the stencil pipeline boundary
"""


class StencilError(Exception):
    """Base class for stencil pipeline failures"""


class DecodeError(StencilError, ValueError):
    """Source bytes could not be turned into an RGBA raster"""


class InvalidParameterError(StencilError, ValueError):
    """A request parameter or the input raster is malformed"""
