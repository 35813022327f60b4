"""
Utilities for reading and writing a bag's file-listing metadata document, ``metadata/files.xml``.

A listing looks like this::

    <files xmlns="http://easy.dans.knaw.nl/schemas/bag/metadata/files/"
           xmlns:dct="http://purl.org/dc/terms/">
      <file filepath="data/video/interview.mp4">
        <dct:identifier>easy-file:1</dct:identifier>
        <dct:source>https://example.org/interview.mp4</dct:source>
        <accessibleToRights>RESTRICTED_REQUEST</accessibleToRights>
        <visibleToRights>ANONYMOUS</visibleToRights>
      </file>
    </files>

The documents are manipulated in memory as :py:mod:`lxml.etree` trees.  An absent rights element
is equivalent to the value ``NONE``.
"""
import os
from pathlib import Path

from lxml import etree

from .constants import (FILES_NS, DCT_NS, FILES_XML, NONE_RIGHTS,
                        ACCESSIBLE_TO_RIGHTS, VISIBLE_TO_RIGHTS)

FILES_TAG = "{%s}files" % FILES_NS
FILE_TAG = "{%s}file" % FILES_NS
IDENTIFIER_TAG = "{%s}identifier" % DCT_NS
SOURCE_TAG = "{%s}source" % DCT_NS
ACCESSIBLE_TAG = "{%s}%s" % (FILES_NS, ACCESSIBLE_TO_RIGHTS)
VISIBLE_TAG = "{%s}%s" % (FILES_NS, VISIBLE_TO_RIGHTS)
FILEPATH_ATTR = "filepath"

def _parser():
    # no DTDs, no external entities, no network access
    return etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False,
                           remove_blank_text=True)

def read_xml(path):
    """
    parse the XML document in the given file and return it as an ElementTree

    :param str|Path path:  the file to read
    :raises lxml.etree.XMLSyntaxError:  if the file does not contain well-formed XML
    """
    return etree.parse(str(path), _parser())

def read_files_xml(bagdir):
    """
    parse and return the file listing of the bag in the given directory
    """
    return read_xml(Path(bagdir) / FILES_XML)

def write_files_xml(bagdir, tree):
    """
    write the given file listing to the ``metadata/files.xml`` file of the bag in the given
    directory, replacing any file that is already there.
    """
    outfile = Path(bagdir) / FILES_XML
    tree.write(str(outfile), pretty_print=True, xml_declaration=True, encoding="UTF-8")
    return outfile

def serialize_node(node):
    """
    return the given element as an XML string, suitable for inclusion in log messages
    """
    return etree.tostring(node, encoding="unicode", with_tail=False)

def file_elements(tree):
    """
    return a list of all the ``file`` entries in the given listing.  As a list is returned (rather
    than an iterator), entries may be safely removed from the tree while looping over the result.
    """
    return list(tree.iter(FILE_TAG))

def get_identifier(fileel):
    """
    return the file identifier (e.g. ``easy-file:1``) set in the given ``file`` entry or None if
    the entry does not have one.
    """
    idel = fileel.find(IDENTIFIER_TAG)
    if idel is None or idel.text is None:
        return None
    return idel.text.strip() or None

def get_filepath(fileel):
    """
    return the value of the ``filepath`` attribute of the given entry or None if it is not set
    """
    return fileel.get(FILEPATH_ATTR) or None

def get_rights(fileel, tag):
    """
    return the trimmed value of a rights element in the given entry, or None if the element is
    missing.

    :param Element fileel:  the ``file`` element to examine
    :param str        tag:  the local name of the rights element, either ``accessibleToRights``
                            or ``visibleToRights``
    """
    el = fileel.find("{%s}%s" % (FILES_NS, tag))
    if el is None:
        return None
    return (el.text or "").strip()

def is_none(fileel, tag):
    """
    return True if the given rights element of the given entry is missing or set to exactly
    ``NONE`` (surrounding whitespace is not ignored)
    """
    el = fileel.find("{%s}%s" % (FILES_NS, tag))
    return el is None or el.text == NONE_RIGHTS

def is_accessible_to_none(fileel):
    return is_none(fileel, ACCESSIBLE_TO_RIGHTS)

def is_visible_to_none(fileel):
    return is_none(fileel, VISIBLE_TO_RIGHTS)

def has_filepath_in(filepaths):
    """
    return a predicate function that returns True if the ``filepath`` of an entry it is given is
    one of the given paths.
    """
    filepaths = set(os.path.normpath(p) for p in filepaths)
    def _has_filepath(fileel):
        fp = get_filepath(fileel)
        return fp is not None and os.path.normpath(fp) in filepaths
    return _has_filepath

def new_file_element(filepath, accessible, visible):
    """
    create a new ``file`` entry (not yet attached to any listing) for the given path and rights
    """
    out = etree.Element(FILE_TAG, nsmap={None: FILES_NS, "dct": DCT_NS})
    out.set(FILEPATH_ATTR, str(filepath))
    etree.SubElement(out, ACCESSIBLE_TAG).text = accessible
    etree.SubElement(out, VISIBLE_TAG).text = visible
    return out

def append_file_elements(tree, fileels):
    """
    append the given ``file`` entries to the end of the listing
    """
    root = tree.getroot()
    for el in fileels:
        root.append(el)
