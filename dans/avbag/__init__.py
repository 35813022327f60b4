"""
Provide functionality for preprocessing bags that contain audio/video materials.

Bags exported from the legacy archive hold zero-length placeholder files where the original
audio/video content was kept out of band.  This package converts each such bag into a chain of
versioned successor bags:  one with the archived originals substituted in place, one stripped of
everything that may not be published, and (where available) one with streaming copies added.
"""
import os
from pathlib import Path

from .constants import *
from .exceptions import *
from . import config

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"

_AVBAGSYSNAME = "AV Bag Preprocessor"
_AVBAGSYSABBREV = "avbag"

class SystemInfoMixin(object):
    """
    a mixin for getting information about the current system that a class is
    a part of.
    """
    def __init__(self, sysname, sysabbrev, subsysname, subsysabbrev, version):
        self._sysn = sysname
        self._sysabbrev = sysabbrev
        self._subsys = subsysname
        self._subsysabbrev = subsysabbrev
        self._ver = version

    @property
    def system_name(self): return self._sysn
    @property
    def system_abbrev(self): return self._sysabbrev
    @property
    def subsystem_name(self): return self._subsys
    @property
    def subsystem_abbrev(self): return self._subsysabbrev
    @property
    def system_version(self): return self._ver

    def getSysLogger(self):
        """
        return the Logger for this (sub)system
        """
        import logging
        out = logging.getLogger(self.system_abbrev)
        if self.subsystem_abbrev:
            out = out.getChild(self.subsystem_abbrev)
        return out

class AVBagSystem(SystemInfoMixin):
    """
    A SystemInfoMixin representing the overall bag preprocessing system.
    """
    def __init__(self, subsysname="", subsysabbrev=""):
        super(AVBagSystem, self).__init__(_AVBAGSYSNAME, _AVBAGSYSABBREV, subsysname, subsysabbrev,
                                          __version__)

system = AVBagSystem()

def find_etc_dir(config=None):
    """
    return the path to the etc directory containing the default configuration files
    """
    def assert_exists(dir, ctxt=""):
        if not os.path.exists(dir):
            msg = "{0}directory does not exist: {1}".format(ctxt, dir)
            raise ConfigurationException(msg)

    # check local configuration
    if config and 'etc_lib' in config:
        assert_exists(config['etc_lib'], "config param 'etc_lib' ")
        return config['etc_lib']

    # look relative to a base directory
    if 'AVBAG_HOME' in os.environ:
        # this is might be the install base or the source base directory;
        # either way, etc, is a subdirectory.
        assert_exists(os.environ['AVBAG_HOME'], "env var AVBAG_HOME ")
        candidates = [Path(os.environ['AVBAG_HOME']) / 'etc']

    else:
        # guess some locations based on the location of the executing code.
        candidates = []
        parents = Path(__file__).resolve().parents

        # assume library being used from its source code location
        candidates.append(parents[2] / 'etc')

        # assume library has been installed; library is rooted at {root}/lib/python,
        if len(parents) > 4:
            candidates.append(parents[4] / 'etc')

    for dir in candidates:
        if dir.exists():
            return str(dir)

    return None

def_etc_dir = find_etc_dir()
