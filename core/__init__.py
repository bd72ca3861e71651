"""Server-side infrastructure shared by the tracker services.

Holds file storage helpers.  Has no dependency on the web framework.
"""

__version__ = "0.3.0"
