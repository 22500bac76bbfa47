"""
the uWSGI script for launching the App Mesh REST service.

This script launches the web service using uwsgi.  For example, one can
launch the service with the following command:

  uwsgi --plugin python3 --http-socket :6060 --wsgi-file appmesh-rest-uwsgi.py \
        --env APPMESH_REST_CONFIG=appmesh_rest.yml

The configuration data can be given as a local file or as an http(s) URL to retrieve it from.
See the documentation for appmesh.daemon.rest.wsgi for the configuration parameters supported by
this service.

This script pays attention to the following environment variables:

   APPMESH_REST_CONFIG   The location (file path or URL) of the configuration data (required)
   APPMESH_REST_LOGFILE  The file to write log messages to; this overrides the logfile
                            parameter in the configuration.
"""
import os, logging

import appmesh.daemon
from appmesh.base import config
from appmesh.daemon.rest import wsgi

confsrc = os.environ.get("APPMESH_REST_CONFIG")
if not confsrc:
    raise config.ConfigurationException("appmesh-rest: configuration location not provided "
                                        "(set APPMESH_REST_CONFIG)")
cfg = config.resolve_configuration(confsrc)

if os.environ.get("APPMESH_REST_LOGFILE"):
    if not cfg.get('logging'):
        cfg['logging'] = {}
    cfg['logging']['logfile'] = os.environ["APPMESH_REST_LOGFILE"]

config.configure_log(config=cfg)

application = wsgi.app(cfg)
logging.info("App Mesh REST service (v%s) ready%s", appmesh.daemon.__version__,
             (application.rest.forwarding and " (forwarding)") or "")
