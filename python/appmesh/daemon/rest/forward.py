"""
Forwarding REST requests to the upstream App Mesh daemon.

A REST front end may run as a separate process from the daemon that actually manages
applications; in that case, it forwards (nearly) all requests to the daemon and relays the
daemon's responses back to the client.
"""
import logging
from abc import ABC, abstractmethod
from logging import Logger

import requests

from .. import system
from ..exceptions import ForwardingError
from .request import HttpRequest

__all__ = [ "Forwarder", "HttpForwarder" ]

deflog = logging.getLogger(system.system_abbrev).getChild("rest").getChild("forward")

_hop_by_hop = set("connection keep-alive proxy-authenticate proxy-authorization te trailers "
                  "transfer-encoding upgrade content-length content-encoding".split())

class Forwarder(ABC):
    """
    an interface for handing a request over to the upstream daemon.  The forwarder takes over
    responsibility for replying to the request.
    """

    @abstractmethod
    def forward(self, request: HttpRequest) -> None:
        """
        send the request to the upstream daemon and reply to it with the daemon's response
        """
        raise NotImplementedError()

class HttpForwarder(Forwarder):
    """
    a Forwarder that relays requests to the upstream daemon's HTTP endpoint.  If the daemon
    cannot be reached, the request is replied to with 503 (Service Unavailable).
    """

    def __init__(self, baseurl: str, timeout: float=30, log: Logger=None):
        """
        :param str  baseurl:  the daemon's base URL (e.g. "https://127.0.0.1:6059")
        :param float timeout: the max number of seconds to wait for the daemon to respond
        :param Logger   log:  the Logger to use for messages
        """
        self.baseurl = baseurl.rstrip('/')
        self.timeout = timeout
        if not log:
            log = deflog
        self.log = log

    def _target_for(self, request: HttpRequest) -> str:
        path = request.relative_uri
        if not path.startswith('/'):
            path = '/' + path
        out = self.baseurl + path
        if request.query:
            out += '?' + request.query
        return out

    def _relay(self, request: HttpRequest) -> requests.Response:
        target = self._target_for(request)
        hdrs = dict((k, v) for k, v in request.headers.items() if k.lower() not in ("host", "content-length"))
        try:
            return requests.request(request.method, target, headers=hdrs, data=request.body or None,
                                    timeout=self.timeout, allow_redirects=False)
        except requests.RequestException as ex:
            raise ForwardingError(target, cause=ex)

    def forward(self, request: HttpRequest) -> None:
        try:
            resp = self._relay(request)
        except ForwardingError as ex:
            self.log.warning("%s %s: %s", request.method, request.relative_uri, str(ex))
            request.reply(503, "Upstream daemon unavailable")
            return

        self.log.debug("%s %s forwarded: upstream replied %s", request.method, request.relative_uri,
                       resp.status_code)
        hdrs = [(k, v) for k, v in resp.headers.items()
                if k.lower() not in _hop_by_hop and k.lower() != "content-type"]
        request.reply(resp.status_code, resp.content, resp.headers.get("Content-Type"), hdrs)
