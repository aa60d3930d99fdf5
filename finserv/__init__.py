"""
FinServ API package.

HTTP service for the personal-finance backend: auth gateway, session guard
and AI chat relay. Persistence lives in the sibling ``userstore`` package.
"""

__version__ = "1.0.0"

# Don't import submodules here: ``userstore`` imports ``finserv.utils.debug``
# and must not pull in the web application while doing so.

__all__ = []
