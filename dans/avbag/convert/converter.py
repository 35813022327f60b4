"""
The driver that converts a directory of exported AV bags into their preprocessed revisions.

Each input bag, found at ``<input>/<bag-parent>/<bag>``, is converted into a chain of up to three
bags, each a new version of the previous one:

  1. the input bag with the dark archive copies substituted for the placeholder files,
     staged at ``<staging>/<bag-parent>/<bag>``;
  2. a copy of revision 1 without the placeholder files and the files that are neither
     accessible nor visible to anyone, staged at ``<staging>/<id>/<id>``;
  3. a copy of revision 2 with the streaming copies added (only if there are any), also
     staged at ``<staging>/<id>/<id>``.

When all revisions are complete, their parent directories are moved into the output directory.
A bag whose parent directory already exists in the output directory is skipped.
"""
import shutil, uuid
from copy import deepcopy
from pathlib import Path

from .. import filesxml
from .. import system
from ..bag import update_manifests, remove_payloads_from_manifests, update_bag_version
from ..exceptions import (StateException, BagConversionException, PlaceHolderMismatchException,
                          StreamingFilesException)
from ..utils.datamgmt import copy_tree, move_tree, count_entries, is_empty_dir, rmtree
from .placeholders import PlaceHolders
from .remover import FileRemover, NoneNoneAndPlaceHolderFilter
from .streaming import SpringfieldFiles

DONE = "done"
PARTIAL = "partial"
FAILED = "failed"
SKIPPED = "skipped"

class BagOutcome(object):
    """
    the result of converting a single input bag
    """

    def __init__(self, bagparent, status, revisions=None, cause=None):
        """
        :param str bagparent:   the name of the input bag's parent directory
        :param str status:      one of DONE, PARTIAL, FAILED, or SKIPPED
        :param list revisions:  the directories, in the output directory, of the revisions that
                                were created
        :param Exception cause: the error that caused the conversion to fail, if applicable
        """
        self.bagparent = bagparent
        self.status = status
        self.revisions = list(revisions or [])
        self.cause = cause

    @property
    def succeeded(self):
        return self.status == DONE

    def __repr__(self):
        return "BagOutcome(%s: %s, %d revisions)" % (self.bagparent, self.status, len(self.revisions))

class ConversionTally(object):
    """
    the counts accumulated over a conversion run
    """

    def __init__(self):
        self.processed = 0
        self.failed = 0
        self.created = 0
        self.done_before = 0
        self.outcomes = []

    def record(self, outcome):
        """
        count the given outcome of a bag conversion
        """
        self.outcomes.append(outcome)
        if outcome.status == SKIPPED:
            self.done_before += 1
            return
        self.created += len(outcome.revisions)
        if outcome.status == DONE:
            self.processed += 1
        else:
            self.failed += 1

    def __str__(self):
        return "Bags processed=%d, failed=%d, created=%d, doneBefore=%d" % \
               (self.processed, self.failed, self.created, self.done_before)

def _new_id():
    return str(uuid.uuid4())

class AVConverter(object):
    """
    a class that converts all of the bags found in an input directory.
    """

    def __init__(self, inputdir, outputdir, stagingdir, sources, keep_input=False,
                 idalloc=None, now=None, log=None):
        """
        create the converter

        :param str|Path inputdir:    the directory containing the exported bags, one per parent
                                     directory
        :param str|Path outputdir:   the directory to move the completed revisions into
        :param str|Path stagingdir:  the directory to assemble revisions in; it must be empty when
                                     the conversion starts
        :param PseudoFileSources sources:  the catalog of external copies of the placeholder files
        :param bool keep_input:      if False (default), the parent directory of an input bag is
                                     deleted after its revisions were moved into the output directory
        :param callable idalloc:     a function that returns a new unique identifier for naming the
                                     directories of revisions 2 and 3 (default: a random UUID)
        :param callable now:         a function that returns the creation time to record in the
                                     revisions (default: the current time)
        :param Logger log:           the Logger to use for messages
        """
        self.inputdir = Path(inputdir).resolve()
        self.outputdir = Path(outputdir).resolve()
        self.stagingdir = Path(stagingdir).resolve()
        self.sources = sources
        self.keep_input = keep_input
        self._idalloc = idalloc or _new_id
        self._now = now or (lambda: None)
        if not log:
            log = system.getSysLogger().getChild("converter")
        self.log = log

    def _check_dirs(self):
        for d, what in ((self.inputdir, "input"), (self.outputdir, "output"), (self.stagingdir, "staging")):
            if not d.is_dir():
                raise StateException("The %s directory does not exist or is not a directory: %s" % (what, d))
        if not is_empty_dir(self.stagingdir):
            raise StateException("The staging directory is not empty. Please empty the directory and try again.")

    def find_bags(self):
        """
        return the list of the bag directories in the input directory; these are the
        subdirectories of the subdirectories of the input directory.
        """
        out = []
        for parent in sorted(self.inputdir.iterdir()):
            if parent.is_dir():
                out.extend(sorted(d for d in parent.iterdir() if d.is_dir()))
        return out

    def convert_all(self):
        """
        convert all of the bags in the input directory

        :return:  the counts of bags converted, failed, created, and skipped
        :rtype: ConversionTally
        :raises StateException:  if the staging directory is not empty or any of the directories
                                 do not exist; no bags are converted in this case.
        """
        self._check_dirs()

        tally = ConversionTally()
        for bagdir in self.find_bags():
            tally.record(self.convert_one(bagdir))

        self.log.info(self.summarize(tally))
        return tally

    def summarize(self, tally):
        """
        return a one-line summary of a conversion run, including the number of entries left in
        each of the directories.
        """
        return "Conversion finished. %s. In directories: %s=%d, %s=%d, %s=%d" % \
               (tally, self.inputdir, count_entries(self.inputdir),
                self.stagingdir, count_entries(self.stagingdir),
                self.outputdir, count_entries(self.outputdir))

    def convert_one(self, bagdir):
        """
        convert a single bag into its revisions.  Errors are logged and reported via the returned
        outcome rather than raised.

        :param str|Path bagdir:  the root directory of the input bag
        :rtype: BagOutcome
        """
        bagdir = Path(bagdir).resolve()
        bagparent = bagdir.parent.name
        if (self.outputdir / bagparent).exists():
            self.log.error("%s skipped, it exists in %s", bagparent, self.outputdir)
            return BagOutcome(bagparent, SKIPPED)

        streamerr = None
        try:
            filestree = filesxml.read_files_xml(bagdir)
            placeholders = PlaceHolders(bagdir, filestree, self.log)
            if not placeholders.has_same_file_ids(self.sources):
                raise PlaceHolderMismatchException("%s: placeholders do not match the files in the "
                                                   "dark archive" % bagparent, bagparent)
            streaming = SpringfieldFiles(filestree, self.sources.get_springfield_files(bagparent),
                                         bagparent, self.log)

            staged = [ self._create_revision1(bagdir, placeholders, filestree) ]
            filestree = deepcopy(filestree)
            staged.append(self._create_revision2(staged[-1], placeholders, filestree))

            if streaming.has_files_to_add():
                try:
                    staged.append(self._create_revision3(staged[-1], placeholders, streaming,
                                                         deepcopy(filestree)))
                except StreamingFilesException as ex:
                    streamerr = ex
            else:
                self.log.info("No streaming files found for %s", bagparent)

            moved = self._move_staged(staged)

        except Exception as ex:
            self.log.error("%s failed, it may or may not have (incomplete) bags in %s",
                           bagparent, self.stagingdir, exc_info=True)
            return BagOutcome(bagparent, FAILED, cause=ex)

        if streamerr:
            self.log.error("%s: revision 3 not created, input kept: %s", bagparent, str(streamerr))
            return BagOutcome(bagparent, PARTIAL, moved, streamerr)

        if not self.keep_input:
            rmtree(bagdir.parent)
        return BagOutcome(bagparent, DONE, moved)

    def _new_revision_dir(self):
        return self.stagingdir / self._idalloc() / self._idalloc()

    def _create_revision1(self, bagdir, placeholders, filestree):
        bagparent = bagdir.parent.name
        revdir = self.stagingdir / bagparent / bagdir.name
        self.log.info("Creating revision 1: %s ### %s", bagparent, revdir.parent.name)

        copy_tree(bagdir, revdir)
        for fileid, src in self.sources.get_darkarchive_files(bagparent).items():
            shutil.copy2(src, revdir / placeholders.get_dest_path(fileid))
        filesxml.write_files_xml(revdir, filestree)
        update_manifests(revdir, self.log)
        return revdir

    def _create_revision2(self, prevdir, placeholders, filestree):
        revdir = self._new_revision_dir()
        self.log.info("Creating revision 2: %s ### %s", prevdir.parent.name, revdir.parent.name)

        copy_tree(prevdir, revdir)
        removed = FileRemover(revdir, self.log).remove_files(filestree,
                                                             NoneNoneAndPlaceHolderFilter(placeholders))
        filesxml.write_files_xml(revdir, filestree)
        remove_payloads_from_manifests(revdir, removed)
        update_bag_version(revdir, prevdir, self._now())
        return revdir

    def _create_revision3(self, prevdir, placeholders, streaming, filestree):
        revdir = self._new_revision_dir()
        self.log.info("Creating revision 3: %s ### %s", prevdir.parent.name, revdir.parent.name)

        streaming.check_files_present()
        copy_tree(prevdir, revdir)
        try:
            streaming.add_files(placeholders, revdir, filestree)
        except StreamingFilesException:
            rmtree(revdir.parent)
            raise
        filesxml.write_files_xml(revdir, filestree)
        update_bag_version(revdir, prevdir, self._now())
        update_manifests(revdir, self.log)
        return revdir

    def _move_staged(self, staged):
        # all or nothing:  revisions already moved are put back if a later one fails
        dests = [self.outputdir / revdir.parent.name for revdir in staged]
        exists = [str(d) for d in dests if d.exists()]
        if exists:
            raise BagConversionException("Output already exists: %s" % ", ".join(exists))

        moved = []
        try:
            for revdir, dest in zip(staged, dests):
                move_tree(revdir.parent, dest)
                moved.append((revdir.parent, dest))
        except OSError:
            for src, dest in reversed(moved):
                move_tree(dest, src)
            raise
        return [dest for src, dest in moved]
