"""
Support for keeping the BagIt tag files of a bag consistent with its contents as the bag is modified.

This package relies on the `bagit <https://github.com/LibraryOfCongress/bagit-python>`_ library for
reading and writing the manifests and the ``bag-info.txt`` file.
"""
from .manifest import update_manifests, remove_payloads_from_manifests
from .baginfo import update_bag_version
