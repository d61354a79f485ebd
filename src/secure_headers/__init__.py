"""HTTP security response headers from declarative policies."""

from .config import SecureHeadersConfig
from .core.builder import CSPBuilder
from .core.directives import CSPDirectiveSet, build_csp_string
from .errors import InvalidConfiguration
from .headers import SecurityHeaderSet
from .profiles import SecurityProfile

__version__ = "0.1.0"

__all__ = [
    "CSPBuilder",
    "CSPDirectiveSet",
    "InvalidConfiguration",
    "SecureHeadersConfig",
    "SecurityHeaderSet",
    "SecurityProfile",
    "__version__",
    "build_csp_string",
]
