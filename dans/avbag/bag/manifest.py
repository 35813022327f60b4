"""
Functions for bringing a bag's payload and tag manifests up to date after its contents have changed.

Both functions use the checksum algorithms already declared by the bag (i.e. the set of
``manifest-<alg>.txt`` files present).  Tag manifests are always regenerated last and never contain
an entry for a tag manifest file itself (see RFC 8493, section 2.2.1).
"""
import os, time, logging
from pathlib import Path

import bagit

from ..constants import IS_VERSION_OF, VERSION_OF_URI_PREFIX, PAYLOAD_DIR
from ..utils.datamgmt import measure_dir_size
from .. import system

log = logging.getLogger(system.system_abbrev).getChild("bag")

__all__ = [ 'update_manifests', 'remove_payloads_from_manifests' ]

def _deposit_name(bag):
    # the uuid of the bag this one is a version of, or else the name of the bag's parent directory
    versionof = bag.info.get(IS_VERSION_OF)
    if isinstance(versionof, list):
        versionof = versionof[0] if versionof else None
    if versionof:
        return versionof.replace(VERSION_OF_URI_PREFIX, "")
    return Path(bag.path).parent.name

def _encode_filename(path):
    # matches the escaping bagit applies when it writes manifests
    return path.replace("\r", "%0D").replace("\n", "%0A")

def update_manifests(bagdir, log=log):
    """
    recompute the checksums of all payload files in the given bag, rewrite its payload manifests,
    update its Payload-Oxum, and regenerate its tag manifests.

    :param str|Path bagdir:  the root directory of the bag to update
    :param Logger      log:  the Logger to record checksum timing to
    :return:  the reloaded bag
    :rtype: bagit.Bag
    """
    bag = bagit.Bag(str(Path(bagdir).resolve()))
    start = time.time()
    bag.save(manifests=True)
    log.info("%s seconds to calculate checksums: %.3f", _deposit_name(bag), time.time() - start)
    return bag

def remove_payloads_from_manifests(bagdir, paths):
    """
    remove the entries for the given payload files from all of the payload manifests of the given
    bag.  The checksums of the remaining files are not recomputed; however, Payload-Oxum is
    recalculated from what is currently on disk and the tag manifests are regenerated.

    :param str|Path bagdir:  the root directory of the bag to update
    :param list      paths:  the paths, relative to the bag's root directory (e.g. ``data/a.mp4``),
                             of the payload files that have been removed from the bag
    :return:  the reloaded bag
    :rtype: bagit.Bag
    """
    bagdir = Path(bagdir).resolve()
    bag = bagit.Bag(str(bagdir))
    removed = set(os.path.normpath(str(p)) for p in paths)

    remaining = dict((p, hashes) for p, hashes in bag.payload_entries().items()
                     if os.path.normpath(p) not in removed)
    for alg in bag.algorithms:
        with open(bagdir / ("manifest-%s.txt" % alg), 'w', encoding=bag.encoding) as fd:
            for p in sorted(remaining):
                if alg in remaining[p]:
                    fd.write("%s  %s\n" % (remaining[p][alg], _encode_filename(p.replace(os.sep, '/'))))

    size, count = measure_dir_size(bagdir / PAYLOAD_DIR)
    bag.info["Payload-Oxum"] = "%s.%s" % (size, count)
    bag.save()
    return bag
