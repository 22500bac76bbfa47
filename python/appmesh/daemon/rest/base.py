"""
The base REST dispatcher for the App Mesh daemon.

:py:class:`RestBase` keeps a table of handler functions for each of the HTTP methods GET, PUT,
POST, and DELETE.  Endpoint layers register their handlers at start-up via
:py:meth:`RestBase.bind_rest_method`; afterward, the transport layer calls one of the
``handle_*()`` methods for each incoming request.  A request is either forwarded to the upstream
daemon or dispatched to the first handler whose path pattern matches the request path.  Any error
raised by a handler is turned into a 400 reply so that each request gets exactly one reply.

Path patterns are either literal paths or Python regular expressions (see :py:mod:`re`) that must
match the whole request path.  A literal pattern that is equal to the request path always wins;
otherwise, regular expression patterns are tried in the order they were first bound.
"""
import re, logging, threading
from collections import OrderedDict
from logging import Logger
from typing import Callable, Union

from appmesh.base.config import ConfigurationException
from .. import system
from ..constants import (HTTP_GET, HTTP_PUT, HTTP_POST, HTTP_DELETE, REST_FILE_PATH_PREFIX,
                         REST_ROOT_TEXT, REST_PATH_NOT_FOUND, REST_UNKNOWN_EXCEPTION, DEF_TOKEN_TTL)
from .request import HttpRequest
from .auth import Authorizer
from .forward import Forwarder
from .tokens import create_jwt_token, get_jwt_token

__all__ = [ "RestBase", "RouteTable", "Route", "normalize_path" ]

deflog = logging.getLogger(system.system_abbrev).getChild("rest")

Handler = Callable[[HttpRequest], None]

def normalize_path(path: str) -> str:
    """
    collapse each occurrence of "//" in a request path to "/"
    """
    return path.replace("//", "/")

class _ReadWriteLock(object):
    # many simultaneous readers or one writer; a waiting writer holds off new readers
    def __init__(self):
        self._reader_count = 0
        self._writers_waiting = 0
        self._cond = threading.Condition(threading.Lock())

    def acquire_shared(self):
        with self._cond:
            while self._writers_waiting > 0:
                self._cond.wait()
            self._reader_count += 1

    def release_shared(self):
        with self._cond:
            if self._reader_count > 0:
                self._reader_count -= 1
            if self._reader_count <= 0:
                self._cond.notify_all()

    def acquire_exclusive(self):
        self._cond.acquire()
        self._writers_waiting += 1
        try:
            while self._reader_count > 0:
                self._cond.wait()
        finally:
            self._writers_waiting -= 1

    def release_exclusive(self):
        self._cond.notify_all()
        self._cond.release()

class Route(object):
    """
    a path pattern bound to a handler function
    """
    __slots__ = ("pattern", "regex", "handler")

    def __init__(self, pattern: str, handler: Handler, regex=None):
        self.pattern = pattern
        self.handler = handler
        self.regex = regex

    def matches(self, path: str) -> bool:
        return self.pattern == path or bool(self.regex and self.regex.fullmatch(path))

class RouteTable(object):
    """
    the table of routes for a single HTTP method.  Routes are meant to be bound at start-up and
    only read afterward; a readers-writer lock allows lookups from many request threads at once
    while keeping a late :py:meth:`bind` safe.
    """

    def __init__(self, log: Logger=None):
        self._routes = OrderedDict()
        self._lock = _ReadWriteLock()
        self.log = log or deflog

    def bind(self, pattern: str, handler: Handler) -> Route:
        """
        bind a handler to a path pattern.  If the pattern is already bound, its handler is
        replaced (while it keeps its place in the matching order).  A pattern that does not
        compile as a regular expression will only match a request path literally.
        """
        try:
            regex = re.compile(pattern)
        except re.error as ex:
            self.log.warning("path pattern %s is not a valid regular expression (%s); "
                             "it will only match literally", pattern, str(ex))
            regex = None

        self._lock.acquire_exclusive()
        try:
            route = self._routes.get(pattern)
            if route:
                route.handler = handler
                route.regex = regex
            else:
                route = Route(pattern, handler, regex)
                self._routes[pattern] = route
            return route
        finally:
            self._lock.release_exclusive()

    def match(self, path: str) -> Union[Route, None]:
        """
        return the route that should handle the given (normalized) request path or None if
        there is no match.
        """
        self._lock.acquire_shared()
        try:
            route = self._routes.get(path)
            if route:
                return route
            for route in self._routes.values():
                if route.matches(path):
                    return route
            return None
        finally:
            self._lock.release_shared()

    def patterns(self):
        """
        return the bound patterns in matching order
        """
        self._lock.acquire_shared()
        try:
            return list(self._routes.keys())
        finally:
            self._lock.release_shared()

    def __len__(self):
        return len(self._routes)

class RestBase(object):
    """
    the base class for the daemon's REST handling.  Subclasses (or other start-up code) bind
    endpoint handlers; handlers typically call :py:meth:`permission_check` before doing their work.
    """

    def __init__(self, forward2server: bool=False, authorizer: Authorizer=None,
                 forwarder: Forwarder=None, log: Logger=None):
        """
        :param bool forward2server:  if True, requests (other than those for file endpoints) are
                                     forwarded to the upstream daemon
        :param Authorizer authorizer:  the authorizer to use for checking tokens and permissions
        :param Forwarder forwarder:  the forwarder to hand requests to; required if
                                     ``forward2server`` is True
        :param Logger          log:  the Logger to use for messages
        """
        if forward2server and not forwarder:
            raise ConfigurationException("RestBase: forwarding requested without a forwarder")
        self._forward2server = forward2server
        self._forwarder = forwarder
        self.authorizer = authorizer
        self.token_ttl = DEF_TOKEN_TTL
        if not log:
            log = deflog
        self.log = log

        self._rest_get_functions = RouteTable(self.log)
        self._rest_put_functions = RouteTable(self.log)
        self._rest_post_functions = RouteTable(self.log)
        self._rest_del_functions = RouteTable(self.log)
        self._tables = {
            HTTP_GET:    self._rest_get_functions,
            HTTP_PUT:    self._rest_put_functions,
            HTTP_POST:   self._rest_post_functions,
            HTTP_DELETE: self._rest_del_functions
        }

    @property
    def forwarding(self) -> bool:
        """
        True if this instance forwards requests to the upstream daemon
        """
        return self._forward2server

    def bind_rest_method(self, method: str, path: str, func: Handler):
        """
        register a handler function for requests of a given method on paths matching a pattern.
        Binding an already bound (method, path) replaces its handler.  Methods other than GET,
        PUT, POST, and DELETE are not supported; they are logged and ignored.
        :param str method:  the HTTP method
        :param str   path:  the path pattern; either a literal path or a regular expression that
                            must match the entire request path
        :param func:        the function to call with the :py:class:`HttpRequest`
        """
        self.log.debug("bind %s for %s", method, path)
        table = self._tables.get((method or "").upper())
        if table is None:
            self.log.error("%s not supported.", method)
            return
        table.bind(path, func)

    bind = bind_rest_method

    def routes_for(self, method: str) -> RouteTable:
        """
        return the route table for the given HTTP method or None if the method is not routed
        """
        return self._tables.get((method or "").upper())

    def forward_rest_request(self, request: HttpRequest) -> bool:
        """
        forward the request to the upstream daemon if forwarding is enabled and the request is
        not for a file endpoint.  Return True if the request was forwarded.
        """
        if not self._forward2server or request.relative_uri.startswith(REST_FILE_PATH_PREFIX):
            return False

        try:
            self._forwarder.forward(request)
        except Exception as ex:
            self.log.warning("forward %s %s failed with error: %s",
                             request.method, request.relative_uri, str(ex))
            if not request.replied:
                request.reply(503, "Upstream daemon unavailable")
        return True

    def handle_get(self, request: HttpRequest):
        if not self.forward_rest_request(request):
            self.handle_rest(request, self._rest_get_functions)

    def handle_put(self, request: HttpRequest):
        if not self.forward_rest_request(request):
            self.handle_rest(request, self._rest_put_functions)

    def handle_post(self, request: HttpRequest):
        if not self.forward_rest_request(request):
            self.handle_rest(request, self._rest_post_functions)

    def handle_delete(self, request: HttpRequest):
        if not self.forward_rest_request(request):
            self.handle_rest(request, self._rest_del_functions)

    def handle_options(self, request: HttpRequest):
        request.reply(200)

    def handle_rest(self, request: HttpRequest, routes: RouteTable):
        """
        dispatch a request to the handler bound to its path within the given route table.
        No error raised by the handler escapes this method.
        """
        self.log.debug("%s %s from %s", request.method, request.relative_uri,
                       request.remote_address or "(unknown)")
        path = normalize_path(request.relative_uri)

        if path == "/" or not path:
            request.reply(200, REST_ROOT_TEXT)
            return

        route = routes.match(path)
        if not route:
            request.reply(404, REST_PATH_NOT_FOUND)
            return

        try:
            route.handler(request)
        except Exception as ex:
            msg = str(ex) or REST_UNKNOWN_EXCEPTION
            self.log.warning("rest %s failed with error: %s", path, msg)
            self._reply_failure(request, msg)
        except BaseException as ex:
            self.log.warning("rest %s failed: %s", path, type(ex).__name__)
            self._reply_failure(request, REST_UNKNOWN_EXCEPTION)

    def _reply_failure(self, request: HttpRequest, message: str):
        if request.replied:
            self.log.warning("%s %s: handler failed after replying; no error reply sent",
                             request.method, request.relative_uri)
            return
        request.reply(400, message)

    # token and permission support for endpoint handlers

    def create_jwt_token(self, uname: str, passwd: Union[str, bytes], timeout_seconds: int=None) -> str:
        """
        issue a token for a user; if ``timeout_seconds`` is not given, the token expires after
        ``token_ttl`` seconds.
        """
        if timeout_seconds is None:
            timeout_seconds = self.token_ttl
        return create_jwt_token(uname, passwd, timeout_seconds)

    def get_jwt_token(self, request: HttpRequest) -> str:
        return get_jwt_token(request)

    def verify_token(self, request: HttpRequest) -> str:
        """
        authenticate the request's token and return the user name (see
        :py:meth:`Authorizer.identify`)
        """
        return self._get_authorizer().identify(request)

    def get_jwt_user_name(self, request: HttpRequest) -> str:
        return self._get_authorizer().get_jwt_user_name(request)

    def permission_check(self, request: HttpRequest, permission: str) -> bool:
        """
        authenticate the request and check that the user holds the given permission (see
        :py:meth:`Authorizer.authorize`)
        """
        return self._get_authorizer().authorize(request, permission)

    def _get_authorizer(self) -> Authorizer:
        if not self.authorizer:
            raise ConfigurationException("RestBase: no authorizer configured")
        return self.authorizer
