"""
Exceptions raised while preprocessing AV bags.

Exceptions fall into two groups.  Those raised while setting up a conversion run (configuration
problems, an unusable staging directory, an inconsistent source mapping) abort the whole run before
any bag is touched.  Subclasses of :py:class:`BagConversionException` indicate that a single bag
could not be converted; the converter catches these (along with unexpected errors) per bag and moves
on to the next one.
"""

__all__ = [
    'AVBagException', 'ConfigurationException', 'StateException', 'PseudoFileSourcesException',
    'BagConversionException', 'PlaceHolderMismatchException', 'StreamingFilesException'
]

class AVBagException(Exception):
    """
    a base exception for all errors raised by this package
    """

    def __init__(self, message=None, cause=None):
        """
        create the exception

        :param str message:     an explanation of what went wrong; if not given, a message will be
                                derived from the ``cause``
        :param Exception cause: the underlying exception that triggered this one (optional)
        """
        if not message:
            if cause:
                message = str(cause)
            else:
                message = "Unknown AV bag processing failure"
        super(AVBagException, self).__init__(message)
        self.cause = cause

class ConfigurationException(AVBagException):
    """
    an exception indicating missing or invalid configuration data
    """
    pass

class StateException(AVBagException):
    """
    an exception indicating that the state of the filesystem (or other system component) does not
    allow the requested operation to proceed.
    """
    pass

class PseudoFileSourcesException(AVBagException):
    """
    an exception indicating that the mapping to the external copies of the placeholder files
    (the dark archive and streaming copies) could not be loaded or is inconsistent with what is
    actually on disk.
    """

    def __init__(self, message=None, src=None, cause=None):
        """
        create the exception

        :param str message:     an explanation of what went wrong
        :param str src:         the mapping file or directory that is the source of the problem
        :param Exception cause: the underlying exception that triggered this one (optional)
        """
        super(PseudoFileSourcesException, self).__init__(message, cause)
        self.source = src

class BagConversionException(AVBagException):
    """
    an exception indicating that a particular bag could not be converted.
    """

    def __init__(self, message=None, bagparent=None, cause=None):
        """
        create the exception

        :param str message:     an explanation of what went wrong
        :param str bagparent:   the name of the directory containing the bag that failed
        :param Exception cause: the underlying exception that triggered this one (optional)
        """
        super(BagConversionException, self).__init__(message, cause)
        self.bagparent = bagparent

class PlaceHolderMismatchException(BagConversionException):
    """
    the placeholder files found in a bag do not match the files listed for it in the mapping to the
    dark archive.
    """
    pass

class StreamingFilesException(BagConversionException):
    """
    the streaming copies listed for a bag could not be added to its final revision
    """
    pass
