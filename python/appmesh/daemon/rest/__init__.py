"""
The base layer of the App Mesh daemon's REST interface.

This package provides the machinery that endpoint implementations plug into:
  *  a dispatcher (:py:class:`~appmesh.daemon.rest.base.RestBase`) that matches each request's
     path against per-method tables of path patterns and invokes the bound handler, or forwards
     the request to the upstream daemon.  The dispatcher guarantees that every request gets
     exactly one reply, turning errors raised by handlers into 400 responses.
  *  JWT bearer token support (:py:mod:`~appmesh.daemon.rest.tokens`) where each token is signed
     with the secret key of the user it was issued to.
  *  an authorizer (:py:class:`~appmesh.daemon.rest.auth.Authorizer`) that verifies a request's
     token against the user directory and checks the user's permissions.
  *  a WSGI front end (:py:mod:`~appmesh.daemon.rest.wsgi`).

The business endpoints themselves are defined elsewhere; they are registered with
:py:meth:`~appmesh.daemon.rest.base.RestBase.bind_rest_method`.
"""
from .request import HttpRequest, HttpReply
from .tokens import create_jwt_token, get_jwt_token, decode_jwt_token, verify_jwt_token, DecodedToken
from .auth import Authorizer
from .forward import Forwarder, HttpForwarder
from .base import RestBase, RouteTable, normalize_path
