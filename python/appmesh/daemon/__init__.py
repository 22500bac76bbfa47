"""
daemon:  the Python side of the App Mesh daemon's REST layer.

The REST layer dispatches HTTP requests to registered endpoint handlers (optionally forwarding
them to the upstream daemon) and authenticates requests via JWT bearer tokens that are signed with
a per-user secret.  See :py:mod:`appmesh.daemon.rest` for the details.
"""
from appmesh.base import AppMeshException, SystemInfoMixin

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"

_AMSYSNAME = "App Mesh"
_AMSYSABBREV = "AppMesh"

class AppMeshSystem(SystemInfoMixin):
    """
    A SystemInfoMixin representing the overall App Mesh system.
    """
    def __init__(self, subsysname="", subsysabbrev=""):
        super(AppMeshSystem, self).__init__(_AMSYSNAME, _AMSYSABBREV,
                                            subsysname, subsysabbrev, __version__)

system = AppMeshSystem()
