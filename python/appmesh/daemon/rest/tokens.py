"""
Issuing and verifying the JWT bearer tokens used to authenticate REST requests.

App Mesh tokens are RFC 7519 JWTs in compact form signed with HS256.  Unlike tokens from a typical
token service, each token is signed with the secret key of the user it was issued to (rather than a
server-wide secret); thus, changing a user's key invalidates all of that user's outstanding tokens.
The claim set includes:

``iss``
    always set to :py:data:`~appmesh.daemon.constants.HTTP_HEADER_JWT_ISSUER`
``iat``
    the issue time (seconds since the epoch)
``exp``
    the expiration time (seconds since the epoch)
``name``
    the name of the authenticated user
"""
import re, time
from collections import namedtuple
from typing import Union

import jwt

from ..constants import (HTTP_HEADER_JWT_AUTHORIZATION, HTTP_HEADER_JWT_BEARER_SPACE, HTTP_HEADER_JWT,
                         HTTP_HEADER_JWT_ISSUER, HTTP_HEADER_JWT_NAME, JWT_ALGORITHM)
from ..exceptions import InvalidArgument, MalformedToken, TokenRejected
from .request import HttpRequest

__all__ = [ "DecodedToken", "create_jwt_token", "get_jwt_token", "decode_jwt_token",
            "verify_jwt_token" ]

DecodedToken = namedtuple("DecodedToken", "token header payload")

_bearer_re = re.compile(r'^' + re.escape(HTTP_HEADER_JWT_BEARER_SPACE.strip()) + r'\s+', re.IGNORECASE)

def create_jwt_token(username: str, secret: Union[str, bytes], ttl: int) -> str:
    """
    create a signed token for a user that expires after a given number of seconds
    :param str username:  the name of the user the token is issued to
    :param secret:        the user's secret key which is used to sign the token
    :param int      ttl:  the number of seconds from now that the token should expire
    :raises InvalidArgument:  if either the username or secret is empty
    """
    if not username or not secret:
        raise InvalidArgument("must provide name and password to generate token")

    now = int(time.time())
    claims = {
        "iss": HTTP_HEADER_JWT_ISSUER,
        "iat": now,
        "exp": now + int(ttl),
        HTTP_HEADER_JWT_NAME: username
    }
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM, headers={"typ": HTTP_HEADER_JWT})

def get_jwt_token(request: HttpRequest) -> str:
    """
    extract the token from the request's Authorization header.  Surrounding whitespace is
    removed, and a leading "Bearer" prefix (matched case-insensitively, along with any whitespace
    that follows it) is stripped once.  An empty string is returned if the header is not set.
    """
    token = request.headers.get(HTTP_HEADER_JWT_AUTHORIZATION)
    if token is None:
        return ""
    token = token.strip()
    m = _bearer_re.match(token)
    if m:
        token = token[m.end():]
    return token

def decode_jwt_token(token: str) -> DecodedToken:
    """
    parse a token without verifying it
    :raises MalformedToken:  if the token cannot be parsed as a JWT
    """
    try:
        header = jwt.get_unverified_header(token)
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as ex:
        raise MalformedToken("Malformed token: " + str(ex), ex)
    return DecodedToken(token, header, payload)

def verify_jwt_token(decoded: DecodedToken, expected_name: str, key: Union[str, bytes],
                     leeway: int=0) -> None:
    """
    verify a decoded token.  The token must be signed with HS256 under the given key, be issued
    by App Mesh, be issued to the expected user, and carry an expiration time that has not yet
    passed.
    :param DecodedToken decoded:  the token, as returned by :py:func:`decode_jwt_token`
    :param str    expected_name:  the name of the user the token must be issued to
    :param key:                   the secret key of that user
    :param int           leeway:  the clock skew tolerance in seconds (default: 0)
    :raises TokenRejected:  if the token fails any of these checks
    """
    try:
        claims = jwt.decode(decoded.token, key, algorithms=[JWT_ALGORITHM],
                            issuer=HTTP_HEADER_JWT_ISSUER, leeway=leeway,
                            options={"require": ["exp", "iss"]})
    except jwt.InvalidTokenError as ex:
        raise TokenRejected("Token verification failed: " + str(ex), ex)

    if claims.get(HTTP_HEADER_JWT_NAME) != expected_name:
        raise TokenRejected("Token verification failed: token not issued to user <%s>" % expected_name)
