"""
Removal of files from a bag that must not be published.
"""
import os
from pathlib import Path

from .. import filesxml
from .. import system
from ..exceptions import BagConversionException
from ..constants import PAYLOAD_DIR
from ..utils.datamgmt import remove_empty_parents
from ..utils.logging import blab

class NoneNoneAndPlaceHolderFilter(object):
    """
    a predicate on ``file`` entries of a files.xml listing that selects the files to be dropped
    from a bag:  those located at a placeholder's path and those that are neither accessible
    nor visible to anyone (i.e. both rights are ``NONE``).
    """

    def __init__(self, placeholders):
        """
        :param PlaceHolders placeholders:  the placeholders found in the bag
        """
        self._placeholder_paths = filesxml.has_filepath_in(placeholders.paths)

    def __call__(self, fileel):
        return self._placeholder_paths(fileel) or \
               (filesxml.is_accessible_to_none(fileel) and filesxml.is_visible_to_none(fileel))

class FileRemover(object):
    """
    a class for deleting selected payload files from a bag along with their files.xml entries
    """

    def __init__(self, bagdir, log=None):
        self.bagdir = Path(bagdir)
        if not log:
            log = system.getSysLogger().getChild("remover")
        self.log = log

    def remove_files(self, filestree, remove_when):
        """
        remove each file whose entry in the given files.xml tree satisfies the given predicate.
        The entry is removed from the tree, the file is deleted, and any directories left empty
        are removed (up to, but not including, the payload directory).  The caller is responsible
        for writing out the updated tree.

        :param ElementTree filestree:  the bag's files.xml listing
        :param callable  remove_when:  a function that takes a ``file`` element and returns True if
                                       the file should be removed
        :return:  the paths, relative to the bag's root directory, of the removed files
        :rtype: list of str
        :raises BagConversionException:  if a file selected for removal cannot be deleted
        """
        removed = []
        for fileel in filesxml.file_elements(filestree):
            if not remove_when(fileel):
                continue

            filepath = filesxml.get_filepath(fileel)
            fileel.getparent().remove(fileel)
            if not filepath:
                continue

            target = self.bagdir / filepath
            try:
                os.remove(target)
            except OSError as ex:
                raise BagConversionException("%s: Could not delete %s" % (self.bagdir.parent.name, target),
                                             self.bagdir.parent.name, cause=ex)
            blab(self.log, "Removed %s", target)
            remove_empty_parents(target, self.bagdir / PAYLOAD_DIR)
            removed.append(filepath)

        return removed
