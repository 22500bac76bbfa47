"""
The user directory consumed by the REST layer's authorizer.

The REST layer does not manage user accounts; it only looks up a user's signing key, lock status,
and permissions.  :py:class:`UserDirectory` defines that read-only interface, and
:py:class:`ConfigUserDirectory` implements it over the daemon's configuration data.
"""
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Iterable, FrozenSet, Union

from appmesh.base.config import ConfigurationException
from .exceptions import UnknownUser

__all__ = [ "User", "UserDirectory", "ConfigUserDirectory" ]

_list_types = (list, tuple, set, frozenset)

class User(object):
    """
    a description of a daemon user account as needed for authentication and authorization
    """

    def __init__(self, name: str, key: Union[str, bytes], locked: bool=False,
                 roles: Iterable[str]=None, permissions: Iterable[str]=None):
        """
        :param str     name:  the user's login name
        :param key:           the user's secret; it serves as the key for signing the user's tokens
        :param bool  locked:  True if the user has been locked out
        :param roles:         the names of the roles assigned to the user
        :param permissions:   permissions granted to the user directly (i.e. not through a role)
        """
        if not name:
            raise ValueError("User: name must be non-empty")
        if not key:
            raise ValueError("User %s: key must be non-empty" % name)
        if isinstance(roles, (str, bytes)) or isinstance(permissions, (str, bytes)):
            raise ValueError("User %s: roles and permissions must be given as lists" % name)
        self.name = name
        self.key = key
        self.locked = bool(locked)
        self.roles = tuple(roles or [])
        self.permissions = frozenset(permissions or [])

    def __repr__(self):
        return "User(%s%s)" % (self.name, ", locked" if self.locked else "")

class UserDirectory(ABC):
    """
    the interface for looking up user information.  All methods are expected to be synchronous,
    idempotent reads that are safe to call from multiple threads.
    """

    @abstractmethod
    def jwt_enabled(self) -> bool:
        """
        return True if JWT authentication is turned on.  When False, the REST layer skips
        authentication and authorization entirely.
        """
        raise NotImplementedError()

    @abstractmethod
    def lookup(self, name: str) -> User:
        """
        return the record for the user with the given name
        :raises UnknownUser:  if the user is not known
        """
        raise NotImplementedError()

    @abstractmethod
    def permissions_of(self, name: str) -> FrozenSet[str]:
        """
        return the full set of permissions held by the given user
        :raises UnknownUser:  if the user is not known
        """
        raise NotImplementedError()

class ConfigUserDirectory(UserDirectory):
    """
    a UserDirectory whose users and roles are read from a configuration dictionary.  The
    following configuration parameters are recognized:

    ``jwt_enabled``
        (bool) _optional_.  Whether JWT authentication is turned on (default: True).

    ``users``
        (dict) _optional_.  A map of user names to user descriptions; each description supports
        the properties ``key`` (str, required), ``locked`` (bool), ``roles`` (list of role names),
        and ``permissions`` (list of permissions granted directly).

    ``roles``
        (dict) _optional_.  A map of role names to the list of permissions the role grants.

    A user's permission set is the union of the permissions of all of its roles and its direct
    permissions.  Roles that are not defined grant nothing.
    """

    def __init__(self, config: Mapping=None):
        if config is None:
            config = {}
        self._jwt_enabled = bool(config.get('jwt_enabled', True))
        self._lock = threading.RLock()
        self._roles = self._load_roles(config.get('roles') or {})
        self._users = {}
        users = config.get('users') or {}
        if not isinstance(users, Mapping):
            raise ConfigurationException("users: must be an object mapping names to descriptions")
        for name, desc in users.items():
            self.add_user(self._user_from_config(name, desc))

    @staticmethod
    def _load_roles(roles):
        if not isinstance(roles, Mapping):
            raise ConfigurationException("roles: must be an object mapping names to permissions")
        out = {}
        for role, perms in roles.items():
            if not isinstance(perms, _list_types):
                raise ConfigurationException("roles.%s: must be a list of permissions" % role)
            out[role] = frozenset(perms)
        return out

    @staticmethod
    def _user_from_config(name, desc):
        if not isinstance(desc, Mapping):
            raise ConfigurationException("users.%s: must be an object" % name)
        if not desc.get('key'):
            raise ConfigurationException("users.%s: missing required key parameter" % name)
        if not isinstance(desc.get('locked', False), bool):
            raise ConfigurationException("users.%s.locked: must be a boolean" % name)
        for prop in ('roles', 'permissions'):
            if desc.get(prop) is not None and not isinstance(desc[prop], _list_types):
                raise ConfigurationException("users.%s.%s: must be a list" % (name, prop))
        return User(name, desc['key'], desc.get('locked', False),
                    desc.get('roles'), desc.get('permissions'))

    def jwt_enabled(self) -> bool:
        return self._jwt_enabled

    def set_jwt_enabled(self, enabled: bool):
        self._jwt_enabled = bool(enabled)

    def add_user(self, user: User):
        """
        add a user to this directory, replacing any existing user with the same name.  Replacing
        a user with one having a different key invalidates all the tokens issued for it.
        """
        with self._lock:
            self._users[user.name] = user

    def lookup(self, name: str) -> User:
        with self._lock:
            user = self._users.get(name)
        if user is None:
            raise UnknownUser(name)
        return user

    def permissions_of(self, name: str) -> FrozenSet[str]:
        user = self.lookup(name)
        out = set(user.permissions)
        for role in user.roles:
            out |= self._roles.get(role, frozenset())
        return frozenset(out)
