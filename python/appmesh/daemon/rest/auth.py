"""
Authentication and authorization of REST requests.

The :py:class:`Authorizer` combines token verification (:py:mod:`~appmesh.daemon.rest.tokens`)
with user information from a :py:class:`~appmesh.daemon.security.UserDirectory`.  Endpoint handlers
typically call :py:meth:`Authorizer.authorize` with the permission their operation requires before
doing any work; failures are raised as exceptions that the dispatcher turns into error replies.
"""
import logging
from logging import Logger

from .. import system
from ..constants import HTTP_HEADER_JWT_NAME
from ..exceptions import MalformedToken, UserLocked, PermissionDenied
from ..security import UserDirectory
from .request import HttpRequest
from .tokens import get_jwt_token, decode_jwt_token, verify_jwt_token

__all__ = [ "Authorizer" ]

deflog = logging.getLogger(system.system_abbrev).getChild("rest").getChild("auth")

class Authorizer(object):
    """
    a class for determining who is making a request and whether they may do what they ask.

    When JWT is disabled in the user directory, every request is considered authorized and no
    token is examined.
    """

    def __init__(self, directory: UserDirectory, log: Logger=None, leeway: int=0):
        """
        :param UserDirectory directory:  the source of user information
        :param Logger              log:  the Logger to use for messages
        :param int              leeway:  the clock skew tolerance, in seconds, to allow when
                                         checking a token's expiration time
        """
        self.directory = directory
        if not log:
            log = deflog
        self.log = log
        self.leeway = leeway

    def get_jwt_user_name(self, request: HttpRequest) -> str:
        """
        return the user name recorded in the request's token without verifying the token.  An
        empty string is returned if JWT is disabled.
        :raises MalformedToken:  if the token cannot be parsed or contains no user name
        """
        if not self.directory.jwt_enabled():
            return ""
        decoded = decode_jwt_token(get_jwt_token(request))
        name = decoded.payload.get(HTTP_HEADER_JWT_NAME)
        if not name:
            raise MalformedToken("No user info in token")
        return name

    def identify(self, request: HttpRequest) -> str:
        """
        authenticate the user making the request and return the user's name.  The token must
        verify under the user's current key, and the user must not be locked.  An empty string
        is returned if JWT is disabled.
        :raises MalformedToken:  if the token cannot be parsed or contains no user name
        :raises UnknownUser:     if the user named in the token is not known
        :raises UserLocked:      if the user has been locked out
        :raises TokenRejected:   if the token fails verification
        """
        if not self.directory.jwt_enabled():
            return ""

        decoded = decode_jwt_token(get_jwt_token(request))
        name = decoded.payload.get(HTTP_HEADER_JWT_NAME)
        if not name or not isinstance(name, str):
            raise MalformedToken("No user info in token")

        user = self.directory.lookup(name)
        if user.locked:
            self.log.warning("Rejecting request from %s: user %s is locked",
                             request.remote_address, name)
            raise UserLocked(name)

        verify_jwt_token(decoded, name, user.key, self.leeway)
        return name

    def authorize(self, request: HttpRequest, permission: str="") -> bool:
        """
        verify the request's token and, if a permission is given, check that the authenticated
        user holds it.  True is returned when JWT is disabled.
        :param HttpRequest request:  the request to authorize
        :param str      permission:  the permission required; if empty, only authentication
                                     is checked.
        :raises PermissionDenied:  if the user does not have the required permission
        :raises AuthorizationFailure:  if authentication fails (see :py:meth:`identify`)
        """
        if not self.directory.jwt_enabled():
            return True

        username = self.identify(request)
        if not permission or not username:
            return True

        if permission in self.directory.permissions_of(username):
            self.log.debug("authentication success for remote: %s with user: %s and permission: %s",
                           request.remote_address, username, permission)
            return True

        self.log.warning("No such permission %s for user %s", permission, username)
        raise PermissionDenied(permission, username)
