"""
Exceptions raised by the App Mesh REST layer.

The authentication and authorization failures are raised from within endpoint handlers and are
caught by the dispatcher (:py:class:`~appmesh.daemon.rest.base.RestBase`), which turns them into
400 replies carrying the exception's message.
"""
from appmesh.base import AppMeshException

__all__ = [ "RestException", "InvalidArgument", "AuthorizationFailure", "MalformedToken",
            "TokenRejected", "UnknownUser", "UserLocked", "PermissionDenied", "ReplyError",
            "ForwardingError" ]

class RestException(AppMeshException):
    """
    a base class for errors raised while handling a REST request
    """
    pass

class InvalidArgument(RestException, ValueError):
    """
    an exception indicating that a required input value was missing or otherwise invalid
    (e.g. an empty username when issuing a token)
    """
    pass

class AuthorizationFailure(RestException):
    """
    a base class for failures to authenticate the requesting user or to authorize the
    requested operation
    """
    pass

class MalformedToken(AuthorizationFailure):
    """
    the token presented by the client could not be parsed as a JWT, or it is missing the
    user information expected in it
    """
    def __init__(self, message="Malformed token", cause=None):
        super(MalformedToken, self).__init__(message)
        self.cause = cause

class TokenRejected(AuthorizationFailure):
    """
    the token could be parsed but failed verification (bad signature, wrong issuer, wrong user
    name, or expired)
    """
    def __init__(self, message="Token rejected", cause=None):
        super(TokenRejected, self).__init__(message)
        self.cause = cause

class UnknownUser(AuthorizationFailure):
    """
    the user named in a token is not known to the user directory
    """
    def __init__(self, username, message=None):
        if not message:
            message = "User <%s> not exist" % username
        super(UnknownUser, self).__init__(message)
        self.username = username

class UserLocked(AuthorizationFailure):
    """
    the user named in a token has been locked out
    """
    def __init__(self, username):
        super(UserLocked, self).__init__("User <%s> was locked" % username)
        self.username = username

class PermissionDenied(AuthorizationFailure):
    """
    the authenticated user does not hold the permission required for the requested operation
    """
    def __init__(self, permission, username):
        super(PermissionDenied, self).__init__("No permission <%s> for user <%s>" %
                                               (permission, username))
        self.permission = permission
        self.username = username

class ReplyError(RestException):
    """
    an attempt was made to reply to a request that has already been replied to.  This indicates
    a programming error in a handler.
    """
    pass

class ForwardingError(RestException):
    """
    a failure to relay a request to the upstream daemon
    """
    def __init__(self, target=None, message=None, cause=None):
        if not message:
            message = "Problem forwarding request"
            if target:
                message += " to " + target
            if cause:
                message += ": " + str(cause)
        super(ForwardingError, self).__init__(message)
        self.target = target
        self.cause = cause
