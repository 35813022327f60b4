"""
test infrastructure and utilities for the AV bag preprocessor.

This provides a temporary directory shared by the tests in a module (see :py:func:`ensure_tmpdir`
and :py:func:`rmtmpdir`), a :py:class:`Tempfiles` manager for files created within it, and functions
for building the input that the preprocessor works on:  AV bags, source directories, and the CSV
file mapping file identifiers to sources.
"""
import os, csv, shutil
from pathlib import Path

import bagit

from .constants import FILES_NS, DCT_NS, DDM_NS, XSI_NS, FILES_XML, DATASET_XML, PAYLOAD_DIR

__all__ = [
    'ensure_tmpdir', 'tmpdir', 'rmtmpdir', 'Tempfiles', 'files_xml_text', 'dataset_xml_text',
    'make_av_bag', 'write_mapping_csv', 'make_source_files', 'pfile'
]

tmpname = "_avbagtest"

def tmpdir(basedir=None, dirname=None):
    """
    return the name of the temporary directory used by the tests.  It will be created
    below ``basedir`` (default: the current directory).
    """
    if not basedir:
        basedir = os.getcwd()
    if not dirname:
        dirname = tmpname + str(os.getpid())
    return os.path.join(basedir, dirname)

def ensure_tmpdir(basedir=None, dirname=None):
    """
    ensure that the temporary directory used by the tests exists and return its path
    """
    tdir = tmpdir(basedir, dirname)
    if not os.path.isdir(tdir):
        os.makedirs(tdir)
    return tdir

def rmtmpdir(basedir=None, dirname=None):
    """
    remove the temporary directory used by the tests along with everything in it
    """
    tdir = tmpdir(basedir, dirname)
    if os.path.exists(tdir):
        shutil.rmtree(tdir)

class Tempfiles(object):
    """
    a class for creating and cleaning up temporary files and directories below a root directory
    """

    def __init__(self, tempdir=None):
        if not tempdir:
            tempdir = ensure_tmpdir()
        self._root = tempdir
        self._files = set()

    @property
    def root(self):
        return self._root

    def __call__(self, child):
        return os.path.join(self.root, child)

    def track(self, filename):
        """
        keep track of a file or directory that has a relative path given by ``filename``
        so that it will be removed by :py:meth:`clean`.  The full path is returned.
        """
        self._files.add(filename)
        return self.__call__(filename)

    def mkdir(self, dirname):
        """
        create a tracked directory below the root and return its full path
        """
        d = self.track(dirname)
        os.makedirs(d, exist_ok=True)
        return d

    def clean(self):
        """
        remove all of the tracked files and directories
        """
        for f in list(self._files):
            path = self(f)
            if os.path.isdir(path):
                shutil.rmtree(path)
            elif os.path.exists(path):
                os.remove(path)
            self._files.discard(f)

    def __del__(self):
        self.clean()

def pfile(path, fileid=None, content=b"", source=None, accessible="ANONYMOUS", visible="ANONYMOUS"):
    """
    describe a payload file to be included in a bag built by :py:func:`make_av_bag`.  Setting
    ``accessible`` or ``visible`` to None leaves that rights element out of files.xml.  A
    placeholder is a file with empty content and a ``source``.

    :param str path:  the path of the file relative to the bag root (e.g. ``data/a/b.mp4``)
    """
    return dict(path=path, id=fileid, content=content, source=source,
                accessible=accessible, visible=visible)

def files_xml_text(files):
    """
    return the text of a files.xml document describing the given files

    :param list files:  descriptions of the files, as returned by :py:func:`pfile`
    """
    lines = ['<?xml version="1.0" encoding="UTF-8"?>',
             '<files xmlns="%s" xmlns:dct="%s">' % (FILES_NS, DCT_NS)]
    for f in files:
        lines.append('  <file filepath="%s">' % f['path'])
        if f.get('id'):
            lines.append('    <dct:identifier>%s</dct:identifier>' % f['id'])
        if f.get('source'):
            lines.append('    <dct:source>%s</dct:source>' % f['source'])
        if f.get('accessible') is not None:
            lines.append('    <accessibleToRights>%s</accessibleToRights>' % f['accessible'])
        if f.get('visible') is not None:
            lines.append('    <visibleToRights>%s</visibleToRights>' % f['visible'])
        lines.append('  </file>')
    lines.append('</files>')
    return "\n".join(lines) + "\n"

def dataset_xml_text(ids=None):
    """
    return the text of a minimal dataset.xml document including the given identifiers

    :param list ids:  (type, value) pairs, where type is e.g. ``DOI`` or ``URN``
    """
    idlines = ['    <dct:identifier xsi:type="id-type:%s">%s</dct:identifier>' % (t, v)
               for t, v in (ids or [])]
    return "\n".join([
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<ddm:DDM xmlns:ddm="%s" xmlns:dct="%s" xmlns:xsi="%s"' % (DDM_NS, DCT_NS, XSI_NS),
        '         xmlns:id-type="http://easy.dans.knaw.nl/schemas/vocab/identifier-type/">',
        '  <ddm:profile>',
        '    <dct:title>An AV dataset</dct:title>',
        '  </ddm:profile>',
        '  <ddm:dcmiMetadata>',
    ] + idlines + [
        '  </ddm:dcmiMetadata>',
        '</ddm:DDM>'
    ]) + "\n"

def make_av_bag(bagdir, files, ids=None, bag_info=None, checksums=("sha1",)):
    """
    create a bag for testing in the given directory (which must not yet exist or be empty)

    :param str|Path bagdir:  the root directory of the bag to create
    :param list files:       descriptions of the payload files, as returned by :py:func:`pfile`
    :param list ids:         (type, value) identifier pairs to include in dataset.xml
    :param dict bag_info:    bag-info.txt properties
    :param tuple checksums:  the manifest algorithms to use
    :return:  the bag's root directory
    :rtype: Path
    """
    bagdir = Path(bagdir).resolve()
    bagdir.mkdir(parents=True, exist_ok=True)
    for f in files:
        # bagit moves the directory contents into the data directory
        relpath = Path(f['path']).relative_to(PAYLOAD_DIR)
        target = bagdir / relpath
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(f['content'])

    bag = bagit.make_bag(str(bagdir), bag_info=dict(bag_info or {}), checksums=list(checksums))

    (bagdir / "metadata").mkdir()
    (bagdir / FILES_XML).write_text(files_xml_text(files), encoding="utf-8")
    (bagdir / DATASET_XML).write_text(dataset_xml_text(ids), encoding="utf-8")
    bag.save()
    return bagdir

def make_source_files(rootdir, contents):
    """
    create files below the given directory

    :param str|Path rootdir:  the root of the source directory
    :param dict contents:     a mapping of paths (relative to ``rootdir``) to file content (bytes)
    """
    rootdir = Path(rootdir)
    for path, content in contents.items():
        target = rootdir / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    return rootdir

def write_mapping_csv(csvfile, rows, header=None):
    """
    write a CSV file mapping file identifiers to source files

    :param str|Path csvfile:  the file to write
    :param list rows:   (easy_file_id, path_in_AV_dir, path_in_springfield_dir, dataset_id) tuples
    :param list header: the column names to write (default: the standard names)
    """
    if header is None:
        header = ["easy_file_id", "path_in_AV_dir", "path_in_springfield_dir", "dataset_id"]
    with open(csvfile, 'w', newline='', encoding='utf-8') as fd:
        wrtr = csv.writer(fd)
        wrtr.writerow(header)
        for row in rows:
            wrtr.writerow(row)
    return csvfile
