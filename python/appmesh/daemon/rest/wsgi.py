"""
A WSGI front end to the REST dispatcher.

:py:class:`RestApp` adapts WSGI requests into :py:class:`~appmesh.daemon.rest.request.HttpRequest`
instances and passes them to a :py:class:`~appmesh.daemon.rest.base.RestBase`.  The :py:func:`app`
function builds a complete application from configuration data; it recognizes the following
parameters:

``jwt_enabled``, ``users``, ``roles``
    the user directory configuration (see :py:class:`~appmesh.daemon.security.ConfigUserDirectory`)

``rest``
    an object with the following (optional) sub-properties:

    ``forward_to``
        (str) the base URL of the upstream daemon; if set, requests are forwarded to it.
    ``forward_timeout``
        (float) the max number of seconds to wait for the upstream daemon (default: 30)
    ``jwt_leeway``
        (int) the clock skew tolerance in seconds to allow when checking token expiration
        (default: 0)
    ``token_ttl``
        (int) the number of seconds a token issued via :py:meth:`RestBase.create_jwt_token` stays
        valid when the caller does not say (default: 7 days)
"""
import logging
from logging import Logger
from collections.abc import Mapping
from typing import Callable

from appmesh.base.config import merge_config
from .. import system
from ..constants import HTTP_GET, HTTP_PUT, HTTP_POST, HTTP_DELETE, HTTP_OPTIONS, DEF_TOKEN_TTL
from ..security import ConfigUserDirectory, UserDirectory
from .auth import Authorizer
from .base import RestBase
from .forward import HttpForwarder
from .request import HttpRequest

__all__ = [ "RestApp", "app" ]

deflog = logging.getLogger(system.system_abbrev).getChild("rest").getChild("wsgi")

DEF_CONFIG = {
    "jwt_enabled": True,
    "rest": {
        "forward_timeout": 30,
        "jwt_leeway": 0,
        "token_ttl": DEF_TOKEN_TTL
    }
}

class RestApp(object):
    """
    a WSGI application that dispatches requests via a :py:class:`RestBase` instance
    """

    def __init__(self, rest: RestBase, log: Logger=None):
        self.rest = rest
        if not log:
            log = deflog
        self.log = log
        self._dispatch = {
            HTTP_GET:     rest.handle_get,
            HTTP_PUT:     rest.handle_put,
            HTTP_POST:    rest.handle_post,
            HTTP_DELETE:  rest.handle_delete,
            HTTP_OPTIONS: rest.handle_options
        }

    def handle_request(self, env: Mapping, start_resp: Callable):
        request = HttpRequest.from_wsgi(env)
        dispatch = self._dispatch.get(request.method)
        if dispatch:
            dispatch(request)
        else:
            request.reply(405, request.method + " not supported")

        if not request.replied:
            self.log.error("%s %s: request was not replied to", request.method, request.relative_uri)
            request.reply(500, "Server failure")

        resp = request.response
        start_resp(resp.status, resp.headers.items())
        if request.method == "HEAD" or not resp.content:
            return []
        return [resp.content]

    def __call__(self, env, start_resp):
        return self.handle_request(env, start_resp)

def app(config: Mapping, directory: UserDirectory=None, log: Logger=None) -> RestApp:
    """
    create a WSGI application from the given configuration
    :param dict          config:  the application configuration
    :param UserDirectory directory:  the directory to look up users with; if not given, one is
                                  built from ``config``.
    :param Logger           log:  the Logger to use
    """
    if not log:
        log = deflog
    config = merge_config(config, DEF_CONFIG)
    restcfg = config.get('rest') or DEF_CONFIG['rest']
    if directory is None:
        directory = ConfigUserDirectory(config)

    authorizer = Authorizer(directory, log.getChild("auth"), restcfg['jwt_leeway'])
    forwarder = None
    if restcfg.get('forward_to'):
        forwarder = HttpForwarder(restcfg['forward_to'], restcfg['forward_timeout'],
                                  log.getChild("forward"))
    rest = RestBase(bool(forwarder), authorizer, forwarder, log)
    rest.token_ttl = int(restcfg['token_ttl'])
    return RestApp(rest, log)
