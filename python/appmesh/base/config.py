"""
Utilities for loading App Mesh configuration data and for setting up logging.

Configuration data is handled as a plain (nested) dictionary.  It can be read from a local
file in either YAML or JSON format or retrieved from a URL (via :py:func:`resolve_configuration`).
"""
import os, sys, json, logging
from collections.abc import Mapping, MutableMapping
from copy import deepcopy
from urllib.parse import urlparse

import yaml, requests

from . import AppMeshException

__all__ = [ "ConfigurationException", "load_from_file", "resolve_configuration", "merge_config",
            "configure_log", "global_logdir", "global_logfile" ]

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"
_log_handler = None
_stderr_handler = None

global_logdir = None
global_logfile = None

class ConfigurationException(AppMeshException):
    """
    a class indicating an error in the configuration of an App Mesh component
    """
    def __init__(self, msg=None, sys=None, cause=None):
        """
        :param str  msg:  a message describing the problem
        :param      sys:  an optional SystemInfoMixin instance for the affected (sub)system
        :param Exception cause:  the exception that triggered this one, if any
        """
        if not msg:
            msg = "Configuration error"
            if cause:
                msg += ": " + str(cause)
        super(ConfigurationException, self).__init__(msg)
        self.system = sys
        self.cause = cause

def load_from_file(configfile: str) -> MutableMapping:
    """
    read the configuration from the given file and return it as a dictionary.  The file format
    is determined by its filename extension: ".json" is read as JSON; otherwise, it is read as
    YAML (which is a superset of JSON).
    """
    try:
        with open(configfile) as fd:
            if configfile.endswith(".json"):
                out = json.load(fd)
            else:
                out = yaml.safe_load(fd)
    except OSError as ex:
        raise ConfigurationException("Unable to read config file, %s: %s" % (configfile, str(ex)),
                                     cause=ex)
    except (ValueError, yaml.YAMLError) as ex:
        raise ConfigurationException("%s: config file not parseable: %s" % (configfile, str(ex)),
                                     cause=ex)

    if out is None:
        out = {}
    if not isinstance(out, Mapping):
        raise ConfigurationException(configfile+": config data is not an object")
    return out

def _load_from_url(configurl: str) -> MutableMapping:
    try:
        resp = requests.get(configurl, headers={"Accept": "application/json, application/yaml"})
        if resp.status_code != 200:
            raise ConfigurationException("%s: config service returned %s %s" %
                                         (configurl, resp.status_code, resp.reason))
        out = yaml.safe_load(resp.text)
    except requests.RequestException as ex:
        raise ConfigurationException("%s: unable to retrieve config: %s" % (configurl, str(ex)),
                                     cause=ex)
    except yaml.YAMLError as ex:
        raise ConfigurationException("%s: config data not parseable: %s" % (configurl, str(ex)),
                                     cause=ex)

    if not isinstance(out, Mapping):
        raise ConfigurationException(configurl+": config data is not an object")
    return out

def resolve_configuration(location: str) -> MutableMapping:
    """
    return the configuration data found at the given location.  The location is either a
    local file path (or a ``file:`` URL) or an ``http:`` or ``https:`` URL.
    """
    url = urlparse(location)
    if url.scheme in ("http", "https"):
        return _load_from_url(location)
    if url.scheme == "file":
        return load_from_file(url.path)
    if url.scheme and len(url.scheme) > 1:
        raise ConfigurationException("Unsupported config location scheme: " + url.scheme)
    return load_from_file(location)

def merge_config(primary: Mapping, defconf: Mapping) -> MutableMapping:
    """
    merge two configurations, with the values in the primary one taking precedence over the
    default one.  Nested dictionaries are merged recursively.  A None value in the primary (e.g.
    an empty YAML entry) does not override a default.  Neither input is altered.
    """
    out = deepcopy(dict(defconf))
    for key, val in primary.items():
        if val is None and key in out:
            continue
        if isinstance(val, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = merge_config(val, out[key])
        else:
            out[key] = deepcopy(val)
    return out

def configure_log(logfile: str=None, level=None, format: str=None, config: Mapping=None,
                  addstderr=False):
    """
    configure the root logger to send messages to a log file (and optionally, to standard error).

    :param str  logfile:  the log file to write to.  If relative, it is written into the directory
                          given by the ``logdir`` config parameter (or the current directory).
                          If not given, the ``logfile`` config parameter is used.
    :param level:         the logging level (as an int or level name) to set the root logger to.
                          If not given, the ``loglevel`` config parameter is used (default: INFO).
    :param str   format:  the message format to use
    :param dict  config:  the configuration containing logging parameters; these may be given at
                          the top level or within a ``logging`` sub-object.
    :param bool addstderr: if True, messages will also be sent to standard error
    """
    global global_logdir, global_logfile, _log_handler, _stderr_handler
    if config is None:
        config = {}
    logcfg = config.get('logging', config) or {}

    if not logfile:
        logfile = logcfg.get('logfile')
    if level is None:
        level = logcfg.get('loglevel', logging.INFO)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ConfigurationException("loglevel: unrecognized level name")
    if not format:
        format = logcfg.get('format', LOG_FORMAT)

    rootlog = logging.getLogger()
    rootlog.setLevel(level)
    frmtr = logging.Formatter(format)

    if logfile:
        global_logdir = logcfg.get('logdir', global_logdir or os.getcwd())
        if not os.path.isabs(logfile):
            logfile = os.path.join(global_logdir, logfile)
        logdir = os.path.dirname(logfile)
        if logdir and not os.path.exists(logdir):
            os.makedirs(logdir)

        if _log_handler:
            rootlog.removeHandler(_log_handler)
            _log_handler.close()
        _log_handler = logging.FileHandler(logfile)
        _log_handler.setFormatter(frmtr)
        _log_handler.setLevel(level)
        rootlog.addHandler(_log_handler)
        global_logfile = logfile

    if addstderr and not _stderr_handler:
        _stderr_handler = logging.StreamHandler(sys.stderr)
        _stderr_handler.setFormatter(logging.Formatter("%(name)s: %(levelname)s: %(message)s"))
        _stderr_handler.setLevel(level)
        rootlog.addHandler(_stderr_handler)

    return rootlog
