"""
Identification of the placeholder files in an input bag.
"""
from pathlib import Path

from .. import filesxml
from .. import system
from ..utils.logging import blab

class PlaceHolders(object):
    """
    the set of placeholder files found in a bag.  A placeholder is a zero-length payload file whose
    entry in ``files.xml`` carries a ``dct:source`` element.

    Constructing this object modifies the given files.xml tree:  every ``dct:source`` element is
    removed from it (whether or not its entry turns out to be a placeholder).  It is this modified
    tree that is expected to be written to the revisions created from the bag.
    """

    def __init__(self, bagdir, filestree, log=None):
        """
        scan the given files.xml tree for placeholders

        :param str|Path bagdir:       the root directory of the bag
        :param ElementTree filestree: the parsed contents of the bag's ``metadata/files.xml``
        :param Logger log:            the Logger to use for messages
        :raises FileNotFoundError:  if a file marked with ``dct:source`` does not exist in the payload
        """
        self.bagdir = Path(bagdir)
        self.bagparent = self.bagdir.parent.name
        self.files_xml = filestree
        if not log:
            log = system.getSysLogger().getChild("placeholders")
        self.log = log
        self._dests = {}
        self._find()

    def _find(self):
        for fileel in filesxml.file_elements(self.files_xml):
            source = fileel.find(filesxml.SOURCE_TAG)
            if source is None:
                continue

            fileid = filesxml.get_identifier(fileel)
            filepath = filesxml.get_filepath(fileel)
            if not fileid:
                self.log.error("No <dct:identifier> found: %s %s",
                               self.bagparent, filesxml.serialize_node(fileel))
            elif not filepath:
                self.log.error("No filepath attribute found: %s %s",
                               self.bagparent, filesxml.serialize_node(fileel))
            elif (self.bagdir / filepath).stat().st_size == 0:
                blab(self.log, "%s: placeholder %s: %s", self.bagparent, fileid, filepath)
                self._dests[fileid] = filepath

            fileel.remove(source)

    @property
    def file_ids(self):
        """
        the identifiers of the placeholder files
        """
        return set(self._dests.keys())

    @property
    def paths(self):
        """
        the paths, relative to the bag's root directory, where the placeholder files are located
        """
        return list(self._dests.values())

    def get_dest_path(self, fileid):
        """
        return the path, relative to the bag's root directory, of the placeholder with the given
        file identifier, or None if there is no such placeholder
        """
        return self._dests.get(fileid)

    def has_same_file_ids(self, sources):
        """
        return True if the placeholders found in this bag are exactly the files that the given
        sources catalog has dark archive copies of.  Any differences are logged as errors.

        :param PseudoFileSources sources:  the catalog of external copies
        """
        mapped = set(sources.get_darkarchive_files(self.bagparent).keys())
        found = self.file_ids

        only_in_mapping = mapped - found
        only_in_bag = found - mapped
        if only_in_mapping:
            self.log.error("%s files in PseudoFileSources but not having <dct:source> and length zero: %s",
                           self.bagparent, sorted(only_in_mapping))
        if only_in_bag:
            self.log.error("%s files having <dct:source> and length zero but not in PseudoFileSources: %s",
                           self.bagparent, sorted(only_in_bag))

        return not only_in_mapping and not only_in_bag

    def __len__(self):
        return len(self._dests)
