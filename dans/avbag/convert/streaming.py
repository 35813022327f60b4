"""
Addition of the streaming copies of audio/video files (from springfield) to a bag.
"""
import os, shutil
from pathlib import Path

from .. import filesxml
from .. import system
from ..constants import ACCESSIBLE_TO_RIGHTS, VISIBLE_TO_RIGHTS, STREAMING_SUFFIX
from ..exceptions import StreamingFilesException
from ..utils.logging import blab

def streaming_dest_path(sourcefile, placeholder):
    """
    determine the path within a bag where a streaming copy should be placed, given the path of the
    placeholder it stands in for.  The streaming copy gets the placeholder's name with the copy's
    own extension; if that extension equals the placeholder's, or if the copy has no extension,
    ``-streaming`` is inserted before it.

    >>> streaming_dest_path("/sf/a/video.mp4", "data/b/video.avi")
    'data/b/video.mp4'
    >>> streaming_dest_path("/sf/a/video.mp4", "data/b/video.mp4")
    'data/b/video-streaming.mp4'
    >>> streaming_dest_path("/sf/a/video", "data/b/video.avi")
    'data/b/video-streaming'
    """
    srcbase, srcext = os.path.splitext(str(sourcefile))
    phbase, phext = os.path.splitext(str(placeholder))
    if not srcext or srcext == phext:
        return phbase + STREAMING_SUFFIX + srcext
    return phbase + srcext

class SpringfieldFiles(object):
    """
    the streaming copies that are available for the files of a bag.
    """

    def __init__(self, filestree, springfield_files, bagparent=None, log=None):
        """
        :param ElementTree filestree:  the bag's files.xml listing, as it was before any files were
                                       removed from the bag
        :param Mapping springfield_files:  a mapping of file identifiers to the streaming copies
                                       available for them
        :param str bagparent:          the name of the bag's parent directory (for messages)
        :param Logger log:             the Logger to use for messages
        """
        self.files_xml = filestree
        self.springfield_files = dict(springfield_files or {})
        self.bagparent = bagparent
        if not log:
            log = system.getSysLogger().getChild("streaming")
        self.log = log
        self._added = set()

        self._entries = {}
        for fileel in filesxml.file_elements(filestree):
            fileid = filesxml.get_identifier(fileel)
            if fileid and fileid not in self._entries:
                self._entries[fileid] = fileel

    def check_files_present(self):
        """
        ensure that every file that a streaming copy is available for is listed in the bag's
        files.xml.

        :raises StreamingFilesException:  if any of the files is missing from files.xml
        """
        missing = sorted(fid for fid in self.springfield_files if fid not in self._entries)
        if missing:
            raise StreamingFilesException("Not all springfield files in the mapping are present in "
                                          "files.xml: %s" % missing, self.bagparent)

    def has_files_to_add(self):
        """
        return True if there are streaming copies that have not yet been added to the bag
        """
        return any(fid not in self._added for fid in self.springfield_files)

    def _rights_for(self, fileid):
        fileel = self._entries.get(fileid)
        if fileel is None:
            raise StreamingFilesException("%s: %s not found in files.xml" % (self.bagparent, fileid),
                                          self.bagparent)
        accessible = filesxml.get_rights(fileel, ACCESSIBLE_TO_RIGHTS)
        visible = filesxml.get_rights(fileel, VISIBLE_TO_RIGHTS)
        for tag, val in ((ACCESSIBLE_TO_RIGHTS, accessible), (VISIBLE_TO_RIGHTS, visible)):
            if val is None:
                raise StreamingFilesException("%s: %s is required on file %s to add its streaming copy" %
                                              (self.bagparent, tag, fileid), self.bagparent)
        return accessible, visible

    def add_files(self, placeholders, bagdir, filestree):
        """
        copy the pending streaming copies into the given bag and append entries describing them
        to its files.xml listing.  The entries are given the same rights as the placeholders they
        stand in for; they are appended to the listing only after all copies have succeeded.  The
        caller is responsible for writing out the updated tree.

        :param PlaceHolders placeholders:  the placeholders found in the original bag
        :param str|Path bagdir:            the root directory of the bag to add files to
        :param ElementTree filestree:      the files.xml listing of the bag to add files to
        :return:  the paths, relative to the bag's root directory, of the added files
        :rtype: list of str
        :raises StreamingFilesException:  if a file lacks its placeholder or rights information, or if
                                          its destination is already taken
        """
        bagdir = Path(bagdir)
        pending = sorted(fid for fid in self.springfield_files if fid not in self._added)

        # gather everything that is needed before copying anything
        taken = set(os.path.normpath(p) for p in
                    (filesxml.get_filepath(el) for el in filesxml.file_elements(filestree)) if p)
        plan = []
        for fileid in pending:
            dest = placeholders.get_dest_path(fileid)
            if not dest:
                raise StreamingFilesException("%s: no placeholder found for %s" % (self.bagparent, fileid),
                                              self.bagparent)
            accessible, visible = self._rights_for(fileid)
            dest = streaming_dest_path(self.springfield_files[fileid], dest)
            if os.path.normpath(dest) in taken or os.path.lexists(bagdir / dest):
                raise StreamingFilesException("%s: cannot add streaming copy of %s: %s already exists" %
                                              (self.bagparent, fileid, dest), self.bagparent)
            taken.add(os.path.normpath(dest))
            plan.append((fileid, self.springfield_files[fileid], dest, accessible, visible))

        newels = []
        added = []
        for fileid, src, dest, accessible, visible in plan:
            target = bagdir / dest
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, target)
            blab(self.log, "Copied %s to %s", src, target)
            newels.append(filesxml.new_file_element(dest, accessible, visible))
            added.append(dest)

        filesxml.append_file_elements(filestree, newels)
        self._added.update(pending)
        return added
