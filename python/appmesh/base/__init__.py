"""
Foundational classes shared across the App Mesh python packages.
"""

__all__ = [ "AppMeshException", "SystemInfoMixin", "config" ]

class AppMeshException(Exception):
    """
    A general base class for exceptions raised by App Mesh components
    """
    pass

class SystemInfoMixin(object):
    """
    a mixin that provides information about the system (or subsystem) a class belongs to.
    """

    def __init__(self, sysname: str, sysabbrev: str, subsysname: str, subsysabbrev: str,
                 version: str):
        self._sysname = sysname
        self._sysabbrev = sysabbrev
        self._subsysname = subsysname
        self._subsysabbrev = subsysabbrev
        self._sysversion = version

    @property
    def system_name(self):
        return self._sysname

    @property
    def system_abbrev(self):
        return self._sysabbrev

    @property
    def subsystem_name(self):
        return self._subsysname

    @property
    def subsystem_abbrev(self):
        return self._subsysabbrev

    @property
    def system_version(self):
        return self._sysversion

from . import config
