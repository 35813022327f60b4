"""
Utilities for obtaining a configuration for the AV bag preprocessor and for setting up logging
according to it.

A configuration is a (possibly nested) dictionary, normally read from a YAML file.  String values
may refer to environment variables using the ``${VAR}`` or ``${VAR:-default}`` syntax; these get
substituted as the file is loaded.
"""
import os, sys, logging, json, re
from collections.abc import Mapping
from copy import deepcopy

import yaml

from .exceptions import ConfigurationException

__all__ = [
    'ConfigurationException', 'load_from_file', 'merge_config',
    'configure_log', 'NORMAL', 'substitute_env_vars'
]

NORMAL = logging.INFO - 5
logging.addLevelName(NORMAL, "NORMAL")

global_logdir = None       # this is set when configure_log() is run
global_logfile = None      # this is set when configure_log() is run
_log_handler = None

DEF_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

_envvar_re = re.compile(r"\$\{(\w+)(:-([^}]*))?\}")

def load_from_file(configfile):
    """
    read the configuration from the given file and return it as a dictionary.
    The file name extension is used to determine its format (with YAML
    being the default).
    """
    with open(configfile) as fd:
        if str(configfile).endswith('.json'):
            out = json.load(fd)
        else:
            # YAML format
            out = yaml.safe_load(fd)

    if out is None:
        out = {}
    if not isinstance(out, Mapping):
        raise ConfigurationException("%s: configuration does not contain a dictionary" % configfile)
    return substitute_env_vars(out)

def substitute_env_vars(config, env=None):
    """
    return a copy of the given configuration in which references to environment variables
    within string values have been replaced with the variables' values.  A reference to a
    variable that is not set and has no default is an error.

    :param config:  the configuration data (dict, list, or scalar) to process
    :param env:     the dictionary of variables to draw values from; if None, ``os.environ``
                    is used.
    :raises ConfigurationException:  if an unset variable without a default is referenced
    """
    if env is None:
        env = os.environ

    def _sub(m):
        if m.group(1) in env:
            return env[m.group(1)]
        if m.group(2) is not None:
            return m.group(3)
        raise ConfigurationException("Environment variable not set: " + m.group(1))

    if isinstance(config, str):
        return _envvar_re.sub(_sub, config)
    if isinstance(config, Mapping):
        return dict((k, substitute_env_vars(v, env)) for k, v in config.items())
    if isinstance(config, list):
        return [substitute_env_vars(v, env) for v in config]
    return config

def merge_config(primary, defconf):
    """
    do a deep merge of a primary configuration on top of a default configuration.  Values in
    the primary take precedence; subdictionaries present in both are merged recursively.  Neither
    input is modified.

    :param dict primary:  the configuration that should override the defaults
    :param dict defconf:  the default configuration
    :rtype: dict
    """
    out = deepcopy(defconf)
    for key in primary:
        if key in out and isinstance(out[key], Mapping) and isinstance(primary[key], Mapping):
            out[key] = merge_config(primary[key], out[key])
        else:
            out[key] = deepcopy(primary[key])
    return out

def configure_log(logfile=None, level=None, format=None, config=None, addstderr=False):
    """
    configure the root logger to write messages to a log file.

    :param str logfile:  the path of the file to write to; if relative, it is interpreted relative
                         to the ``logdir`` config parameter (or, if not set, the ``working_dir``
                         parameter or the current directory).  If not given, the ``logfile``
                         config parameter is used.
    :param int level:    the logging level; if not given, the ``loglevel`` config parameter is
                         consulted (default: NORMAL)
    :param str format:   the format for log messages
    :param dict config:  the configuration to draw default values from
    :param bool|str addstderr:  if True (or a format string), also send messages to standard error
    """
    global global_logdir, global_logfile, _log_handler
    if config is None:
        config = {}

    if not logfile:
        logfile = config.get('logfile', 'avbag.log')
    if not os.path.isabs(logfile):
        logdir = config.get('logdir', config.get('working_dir', os.getcwd()))
        logfile = os.path.join(logdir, logfile)
    global_logdir = os.path.dirname(logfile)
    global_logfile = logfile

    if level is None:
        level = config.get('loglevel', NORMAL)
        if isinstance(level, str):
            lev = logging.getLevelName(level.upper())
            if not isinstance(lev, int):
                raise ConfigurationException("Unrecognized loglevel value: " + level)
            level = lev
    if not format:
        format = config.get('logformat', DEF_LOG_FORMAT)

    rootlogger = logging.getLogger()
    if _log_handler:
        rootlogger.removeHandler(_log_handler)
        _log_handler.close()

    if global_logdir and not os.path.exists(global_logdir):
        os.makedirs(global_logdir)
    _log_handler = logging.FileHandler(logfile)
    _log_handler.setLevel(logging.DEBUG)
    _log_handler.setFormatter(logging.Formatter(format))
    rootlogger.addHandler(_log_handler)
    rootlogger.setLevel(level)

    if addstderr:
        if not isinstance(addstderr, str):
            addstderr = format
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(addstderr))
        rootlogger.addHandler(handler)

    rootlogger.log(NORMAL, "logging to " + logfile)
