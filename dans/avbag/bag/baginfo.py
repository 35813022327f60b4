"""
Functions for recording the version relationship between successive revisions of a bag in their
``bag-info.txt`` files.
"""
from datetime import datetime
from pathlib import Path

import bagit

from ..constants import (IS_VERSION_OF, CREATED, BASE_ID_PREFIX, BASE_ID_TYPES,
                         VERSION_OF_URI_PREFIX, DATASET_XML, DDM_NS, DCT_NS, XSI_NS)
from ..filesxml import read_xml

__all__ = [ 'update_bag_version', 'read_base_ids', 'format_created' ]

ID_TYPE_PREFIX = "id-type:"

def format_created(when=None):
    """
    format the given time (default: now) as an ISO 8601 date-time with a local time zone offset,
    e.g. ``2024-05-01T13:45:10.123+02:00``.
    """
    if when is None:
        when = datetime.now()
    if when.tzinfo is None:
        when = when.astimezone()
    return when.isoformat(timespec='milliseconds')

def read_base_ids(datasetxml):
    """
    extract the DOI and URN identifiers of a dataset from its ``dataset.xml`` metadata.  Only
    ``dct:identifier`` elements within the ``ddm:dcmiMetadata`` section are considered; where more
    than one identifier has the same type, the first one wins.

    :param str|Path datasetxml:  the path to the dataset metadata file
    :return:  a dictionary mapping the identifier type (``DOI`` or ``URN``) to its value
    :rtype: dict
    """
    out = {}
    dcmi = read_xml(datasetxml).getroot().find(".//{%s}dcmiMetadata" % DDM_NS)
    if dcmi is None:
        return out

    for idel in dcmi.iter("{%s}identifier" % DCT_NS):
        idtype = idel.get("{%s}type" % XSI_NS, "")
        if idtype.startswith(ID_TYPE_PREFIX):
            idtype = idtype[len(ID_TYPE_PREFIX):]
        if idtype in BASE_ID_TYPES and idtype not in out and idel.text:
            out[idtype] = idel.text.strip()
    return out

def update_bag_version(newbagdir, prevbagdir, now=None):
    """
    mark the bag in ``newbagdir`` as a new version of the one in ``prevbagdir``.  This sets
    ``Is-Version-Of`` to a URN built from the name of the previous bag's parent directory and
    ``Created`` to the current time.  If the bag does not yet have both ``Base-DOI`` and
    ``Base-URN``, these are filled in from the bag's ``metadata/dataset.xml``.  The updated
    ``bag-info.txt`` and the tag manifests are then written out.

    :param str|Path newbagdir:   the root directory of the bag to update
    :param str|Path prevbagdir:  the root directory of the bag that the new one succeeds
    :param datetime now:         the creation time to record (default: the current time)
    :return:  the reloaded bag
    :rtype: bagit.Bag
    """
    newbagdir = Path(newbagdir).resolve()
    bag = bagit.Bag(str(newbagdir))

    bag.info.pop(IS_VERSION_OF, None)
    bag.info.pop(CREATED, None)
    bag.info[IS_VERSION_OF] = VERSION_OF_URI_PREFIX + Path(prevbagdir).resolve().parent.name
    bag.info[CREATED] = format_created(now)

    if any(not bag.info.get(BASE_ID_PREFIX + t) for t in BASE_ID_TYPES):
        # once set on the second revision, later revisions inherit them
        for idtype, value in read_base_ids(newbagdir / DATASET_XML).items():
            bag.info[BASE_ID_PREFIX + idtype] = value

    bag.save()
    return bag
