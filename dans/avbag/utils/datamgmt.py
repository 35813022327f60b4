"""
Utility functions managing data and files
"""
import os, shutil, time
from pathlib import Path

__all__ = [
    'measure_dir_size', 'count_entries', 'is_empty_dir', 'remove_empty_parents',
    'copy_tree', 'move_tree', 'rmtree_retry', 'rmtree'
]

def measure_dir_size(dirpath):
    """
    return a pair of numbers representing, in order, the totaled size (in bytes)
    of all files below the directory and the total number of files.

    Note that the byte count does not include the capacity taken up by directory
    entries and thus is not an accurate measure of the space the directory takes
    up on disk.

    :param str dirpath:  the path to the directory of interest
    :rtype:  list containing 2 ints
    """
    size = 0
    count = 0
    for root, subdirs, files in os.walk(dirpath):
        count += len(files)
        for f in files:
            size += os.stat(os.path.join(root,f)).st_size
    return [size, count]

def count_entries(dirpath):
    """
    return the number of entries (files and directories) directly within the given directory
    """
    with os.scandir(dirpath) as it:
        return sum(1 for e in it)

def is_empty_dir(dirpath):
    """
    return True if the given path is a directory with no entries in it
    """
    with os.scandir(dirpath) as it:
        return next(it, None) is None

def remove_empty_parents(path, stopdir):
    """
    remove the parent directory of the given path if it is empty, and then its parent if that
    becomes empty, and so on up to, but not including, ``stopdir``.

    :param str|Path path:     the path to a (typically just deleted) file
    :param str|Path stopdir:  the ancestor directory that must not be removed
    :return:  the list of directories that were removed
    :rtype: list of Path
    """
    stopdir = Path(stopdir)
    removed = []
    parent = Path(path).parent
    while parent != stopdir and stopdir in parent.parents and is_empty_dir(parent):
        parent.rmdir()
        removed.append(parent)
        parent = parent.parent
    return removed

def copy_tree(srcdir, destdir):
    """
    copy a directory tree, preserving file timestamps, to a new location.  The parent of
    ``destdir`` is created as needed; ``destdir`` itself must not yet exist.
    """
    destdir = Path(destdir)
    destdir.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(srcdir, destdir, copy_function=shutil.copy2)
    return destdir

def move_tree(srcdir, destdir):
    """
    move a directory tree to a new location which must not yet exist
    :raises FileExistsError:  if ``destdir`` already exists
    """
    if os.path.lexists(destdir):
        raise FileExistsError("Destination already exists: %s" % destdir)
    shutil.move(str(srcdir), str(destdir))
    return Path(destdir)

def rmtree_retry(rootdir, retries=1):
    """
    an implementation of rmtree that is intended to work on NSF-mounted
    directories where shutil.rmtree can often fail.
    """
    if not os.path.exists(rootdir):
        return
    if not os.path.isdir(rootdir):
        os.remove(rootdir)
        return

    for root,subdirs,files in os.walk(rootdir, topdown=False):
        try:
            shutil.rmtree(root)
        except OSError as ex:
            if retries <= 0:
                raise
            # wait a little for NFS to catch up
            time.sleep(0.25)
            rmtree(root, retries=retries-1)

rmtree = rmtree_retry
