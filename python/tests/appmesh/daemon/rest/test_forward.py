import os, logging, tempfile
import unittest as test
from unittest import mock

import requests
from requests.structures import CaseInsensitiveDict

from appmesh.daemon.exceptions import ForwardingError
from appmesh.daemon.rest.request import HttpRequest
from appmesh.daemon.rest.forward import HttpForwarder

tmpdir = tempfile.TemporaryDirectory(prefix="_test_forward.")
loghdlr = None
rootlog = None
def setUpModule():
    global loghdlr
    global rootlog
    rootlog = logging.getLogger()
    rootlog.setLevel(logging.DEBUG)
    loghdlr = logging.FileHandler(os.path.join(tmpdir.name,"test_forward.log"))
    loghdlr.setLevel(logging.DEBUG)
    loghdlr.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    rootlog.addHandler(loghdlr)

def tearDownModule():
    global loghdlr
    if loghdlr:
        if rootlog:
            rootlog.removeHandler(loghdlr)
            loghdlr.flush()
            loghdlr.close()
        loghdlr = None
    tmpdir.cleanup()

def upstream_response(code, content, headers):
    resp = mock.Mock(status_code=code, content=content)
    resp.headers = CaseInsensitiveDict(headers)
    return resp

class TestHttpForwarder(test.TestCase):

    def setUp(self):
        self.fwd = HttpForwarder("https://127.0.0.1:6059/", 5)
        self.sent = []

    def test_target(self):
        req = HttpRequest("/appmesh/applications", query="name=ping")
        self.assertEqual(self.fwd._target_for(req), "https://127.0.0.1:6059/appmesh/applications?name=ping")
        req = HttpRequest("appmesh/applications")
        self.assertEqual(self.fwd._target_for(req), "https://127.0.0.1:6059/appmesh/applications")

    @mock.patch("appmesh.daemon.rest.forward.requests.request")
    def test_forward(self, reqfn):
        reqfn.return_value = upstream_response(201, b'{"name":"ping"}',
                                               {"Content-Type": "application/json",
                                                "Content-Length": "15",
                                                "Connection": "keep-alive",
                                                "X-Exit-Code": "0"})
        req = HttpRequest("/appmesh/app/ping", "PUT",
                          {"Authorization": "Bearer xxx", "Host": "mesh:6060", "Content-Length": "4"},
                          body=b"data", reply_to=self.sent.append)
        self.fwd.forward(req)

        reqfn.assert_called_once()
        args, kw = reqfn.call_args
        self.assertEqual(args, ("PUT", "https://127.0.0.1:6059/appmesh/app/ping"))
        self.assertEqual(kw['headers'], {"Authorization": "Bearer xxx"})
        self.assertEqual(kw['data'], b"data")
        self.assertEqual(kw['timeout'], 5)
        self.assertFalse(kw['allow_redirects'])

        self.assertEqual(len(self.sent), 1)
        resp = req.response
        self.assertEqual(resp.code, 201)
        self.assertEqual(resp.content, b'{"name":"ping"}')
        self.assertEqual(resp.headers["Content-Type"], "application/json")
        self.assertEqual(resp.headers["Content-Length"], "15")
        self.assertEqual(resp.headers["X-Exit-Code"], "0")
        self.assertIsNone(resp.headers.get("Connection"))

    @mock.patch("appmesh.daemon.rest.forward.requests.request")
    def test_forward_error_status(self, reqfn):
        reqfn.return_value = upstream_response(400, b"User <alice> was locked",
                                               {"Content-Type": "text/plain"})
        req = HttpRequest("/appmesh/applications")
        self.fwd.forward(req)
        self.assertIsNone(reqfn.call_args[1]['data'])
        self.assertEqual(req.response.code, 400)
        self.assertEqual(req.response.text, "User <alice> was locked")

    @mock.patch("appmesh.daemon.rest.forward.requests.request")
    def test_unavailable(self, reqfn):
        reqfn.side_effect = requests.ConnectionError("Connection refused")
        req = HttpRequest("/appmesh/applications", reply_to=self.sent.append)
        self.fwd.forward(req)
        self.assertEqual(len(self.sent), 1)
        self.assertEqual(req.response.code, 503)
        self.assertEqual(req.response.text, "Upstream daemon unavailable")

    @mock.patch("appmesh.daemon.rest.forward.requests.request")
    def test_relay_error(self, reqfn):
        reqfn.side_effect = requests.Timeout("timed out")
        with self.assertRaises(ForwardingError) as cm:
            self.fwd._relay(HttpRequest("/appmesh/applications"))
        self.assertIn("https://127.0.0.1:6059/appmesh/applications", str(cm.exception))
        self.assertIsInstance(cm.exception.cause, requests.Timeout)


if __name__ == '__main__':
    test.main()
