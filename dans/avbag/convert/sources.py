"""
This module provides access to the external copies of the files that are represented in the input
bags by placeholders.  There are two such sources:

  * the *dark archive*, holding the original audio/video files, and
  * *springfield*, holding streaming versions of (some of) them.

A CSV file maps each file identifier to its location in either source.
"""
import csv
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from ..constants import CSV_FILE_ID, CSV_DARKARCHIVE_PATH, CSV_SPRINGFIELD_PATH, CSV_REQUIRED_COLUMNS
from ..exceptions import ConfigurationException, PseudoFileSourcesException
from .. import system

_EMPTY = MappingProxyType({})

class PseudoFileSources(object):
    """
    a catalog of the external copies of placeholder files, organized by the name of the directory
    that contains an input bag (the *bag parent*).  The catalog is loaded once at construction
    and is read-only thereafter.

    The configuration provided at construction supports the following parameters:

    ``darkarchive_dir``
         (str) _required_.  The root directory of the dark archive copies.
    ``springfield_dir``
         (str) _required_.  The root directory of the streaming copies.
    ``path``
         (str) _required_.  The CSV file mapping file identifiers to locations below the two root
         directories.  It must include the columns ``easy_file_id``, ``path_in_AV_dir``, and
         ``path_in_springfield_dir``.  The first segment of ``path_in_AV_dir`` is taken to be the
         name of the bag parent directory.
    """

    def __init__(self, config, log=None):
        """
        load the catalog

        :param dict config:  the configuration identifying the source directories and the mapping file
        :param Logger log:   the Logger to send warnings to
        :raises ConfigurationException:      if any of the required parameters are missing
        :raises PseudoFileSourcesException:  if the directories, the mapping file, or any of the files
                                             it refers to do not exist, or if the mapping file is
                                             invalid.
        """
        if not isinstance(config, Mapping):
            config = vars(config)
        missing = [p for p in ("darkarchive_dir", "springfield_dir", "path") if not config.get(p)]
        if missing:
            raise ConfigurationException("pseudo_file_sources configuration is incomplete; missing: " +
                                         ", ".join(missing))
        if not log:
            log = system.getSysLogger().getChild("sources")
        self.log = log

        dirs = [Path(config['darkarchive_dir']), Path(config['springfield_dir'])]
        notdirs = [str(d) for d in dirs if not d.is_dir()]
        if notdirs:
            raise PseudoFileSourcesException("Not existing or not a directory: [%s]" % ", ".join(notdirs),
                                             src=notdirs[0])
        self.darkarchive_dir = dirs[0].resolve()
        self.springfield_dir = dirs[1].resolve()
        self.csvfile = Path(config['path'])

        self._darkarchive = {}
        self._springfield = {}
        self._read_csv(self.csvfile)
        self._check_files_exist()

    def _read_csv(self, csvfile):
        if not csvfile.is_file():
            raise PseudoFileSourcesException("Does not exist or is not a file: %s" % csvfile, src=str(csvfile))

        badcount = 0
        try:
            with open(csvfile, newline='', encoding='utf-8') as fd:
                rdr = csv.DictReader(fd)
                headers = rdr.fieldnames or []
                for col in CSV_REQUIRED_COLUMNS:
                    if col not in headers:
                        raise PseudoFileSourcesException("%s not found in actual CSV headers: %s" %
                                                         (col, headers), src=str(csvfile))

                for rec in rdr:
                    fileid = (rec.get(CSV_FILE_ID) or "").strip()
                    avpath = (rec.get(CSV_DARKARCHIVE_PATH) or "").strip()
                    sfpath = (rec.get(CSV_SPRINGFIELD_PATH) or "").strip()
                    if not fileid or not avpath:
                        badcount += 1
                        self.log.warning("No value in column %s and/or %s: %s",
                                         CSV_DARKARCHIVE_PATH, CSV_FILE_ID, rec)
                        continue

                    bagparent = Path(avpath).parts[0]
                    self._darkarchive.setdefault(bagparent, {})[fileid] = avpath
                    if sfpath:
                        self._springfield.setdefault(bagparent, {})[fileid] = sfpath

        except (UnicodeDecodeError, csv.Error) as ex:
            raise PseudoFileSourcesException("%s: unable to parse CSV: %s" % (csvfile, str(ex)),
                                             src=str(csvfile), cause=ex)

        if badcount > 0:
            raise PseudoFileSourcesException("%d records have missing values. See warnings." % badcount,
                                             src=str(csvfile))

    def _check_files_exist(self):
        def _missing(basedir, catalog):
            return [str(basedir / p) for files in catalog.values() for p in files.values()
                    if not (basedir / p).exists()]

        missing_sf = _missing(self.springfield_dir, self._springfield)
        missing_av = _missing(self.darkarchive_dir, self._darkarchive)
        if missing_sf or missing_av:
            raise PseudoFileSourcesException("Not existing files: [%s] [%s]" %
                                             (", ".join(missing_sf), ", ".join(missing_av)),
                                             src=str(self.csvfile))

    def _resolved(self, basedir, files):
        if not files:
            return _EMPTY
        return MappingProxyType(dict((fid, basedir / p) for fid, p in files.items()))

    def get_darkarchive_files(self, bagparent):
        """
        return a read-only mapping of file identifiers to the absolute paths of their dark archive
        copies for the bag found in the given bag parent directory.  An empty mapping is returned
        if the bag parent is not known to the catalog.

        :param str bagparent:  the name of the directory containing the bag
        :rtype: Mapping
        """
        return self._resolved(self.darkarchive_dir, self._darkarchive.get(bagparent))

    def get_springfield_files(self, bagparent):
        """
        return a read-only mapping of file identifiers to the absolute paths of their streaming
        copies for the bag found in the given bag parent directory.  An empty mapping is returned
        if the bag parent is not known to the catalog or has no streaming copies.

        :param str bagparent:  the name of the directory containing the bag
        :rtype: Mapping
        """
        return self._resolved(self.springfield_dir, self._springfield.get(bagparent))
