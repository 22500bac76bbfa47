"""
The request object handed to REST handlers.

An :py:class:`HttpRequest` carries what the dispatcher and endpoint handlers need from an incoming
HTTP request along with a one-shot reply capability:  each request must be replied to exactly once.
"""
import threading
from collections.abc import Mapping
from http import HTTPStatus
from typing import Callable, Union, List, Tuple
from wsgiref.headers import Headers

from ..exceptions import ReplyError

__all__ = [ "HttpRequest", "HttpReply" ]

class HttpReply(object):
    """
    the response recorded for a request
    """

    def __init__(self, code: int, content: bytes=b"", headers: Headers=None):
        self.code = int(code)
        self.content = content
        self.headers = headers if headers is not None else Headers([])

    @property
    def reason(self):
        """
        the standard phrase associated with this reply's status code
        """
        try:
            return HTTPStatus(self.code).phrase
        except ValueError:
            return "Unknown Status"

    @property
    def status(self):
        """
        the status line as it should be given to a WSGI start_response function
        """
        return "%d %s" % (self.code, self.reason)

    @property
    def text(self):
        return self.content.decode('utf-8', errors='replace')

class HttpRequest(object):
    """
    a request received by the REST layer.

    The request header fields are available via ``headers`` whose lookups are case-insensitive.
    A handler responds by calling :py:meth:`reply` exactly once.
    """

    def __init__(self, relative_uri: str, method: str="GET", headers=None, remote_address: str="",
                 body: bytes=b"", query: str="",
                 reply_to: Callable[[HttpReply], None]=None):
        """
        :param str relative_uri:  the requested resource path (without the query string)
        :param str       method:  the HTTP method (e.g. "GET")
        :param         headers:   the request header fields, either as a dictionary or a list of
                                  name-value pairs
        :param str remote_address:  the address of the remote client
        :param bytes       body:  the request body content
        :param str        query:  the request's query string
        :param Callable reply_to: a function that delivers the reply to the client; it is called
                                  once with the :py:class:`HttpReply` when :py:meth:`reply` is called.
                                  If not given, the reply is only recorded on this object.
        """
        self.relative_uri = relative_uri or ""
        self.method = (method or "GET").upper()
        if headers is None:
            headers = []
        elif isinstance(headers, Mapping):
            headers = list(headers.items())
        self.headers = Headers(list(headers))
        self.remote_address = remote_address or ""
        self.body = body or b""
        self.query = query or ""
        self._reply_to = reply_to
        self._reply = None
        self._lock = threading.Lock()

    @classmethod
    def from_wsgi(cls, env: Mapping, reply_to: Callable[[HttpReply], None]=None):
        """
        create a request from a WSGI environment dictionary
        """
        hdrs = []
        for key, val in env.items():
            if key.startswith("HTTP_"):
                hdrs.append((key[len("HTTP_"):].replace('_', '-').title(), val))
        if env.get('CONTENT_TYPE'):
            hdrs.append(("Content-Type", env['CONTENT_TYPE']))
        if env.get('CONTENT_LENGTH'):
            hdrs.append(("Content-Length", env['CONTENT_LENGTH']))

        body = b""
        bodyin = env.get('wsgi.input')
        if bodyin is not None:
            try:
                length = int(env.get('CONTENT_LENGTH') or 0)
            except ValueError:
                length = 0
            if length > 0:
                body = bodyin.read(length)

        return cls(env.get('PATH_INFO', ''), env.get('REQUEST_METHOD', 'GET'), hdrs,
                   env.get('REMOTE_ADDR', ''), body, env.get('QUERY_STRING', ''), reply_to)

    @property
    def replied(self) -> bool:
        """
        True if :py:meth:`reply` has been called on this request
        """
        return self._reply is not None

    @property
    def response(self) -> HttpReply:
        """
        the reply sent for this request or None if it has not been replied to yet
        """
        return self._reply

    def reply(self, code: int, content: Union[str, bytes]=None, contenttype: str=None,
              headers: List[Tuple[str, str]]=None, encoding: str='utf-8') -> HttpReply:
        """
        reply to the client.  This may only be called once per request.

        :param int     code:  the HTTP status code to respond with
        :param content:       the body content, given either as str or bytes.  If not provided,
                              the body will be empty.
        :param str contenttype:  the MIME type to attach to the content.  If not provided and
                              content is given, "text/plain" is assumed for str content and
                              "application/octet-stream" for bytes.
        :param headers:       additional header fields to include, as a list of name-value pairs
        :param str encoding:  the encoding used to turn str content into bytes
        :raises ReplyError:   if this request has already been replied to
        """
        if content is None:
            content = b""
        elif not isinstance(content, (str, bytes)):
            raise TypeError("reply: content must be str or bytes")

        hdrs = Headers(list(headers or []))
        if content:
            if not contenttype:
                contenttype = (isinstance(content, str) and "text/plain") or "application/octet-stream"
            if isinstance(content, str):
                content = content.encode(encoding)
        if contenttype:
            hdrs["Content-Type"] = contenttype
        hdrs["Content-Length"] = str(len(content))

        with self._lock:
            if self._reply is not None:
                raise ReplyError("%s %s: request already replied to with status %d" %
                                 (self.method, self.relative_uri, self._reply.code))
            self._reply = HttpReply(code, content, hdrs)

        if self._reply_to:
            self._reply_to(self._reply)
        return self._reply

    def __repr__(self):
        return "HttpRequest(%s %s)" % (self.method, self.relative_uri)
