"""
The conversion of exported AV bags into their preprocessed revisions.  The main entry point is
:py:class:`~dans.avbag.convert.converter.AVConverter`.
"""
from .sources import PseudoFileSources
from .placeholders import PlaceHolders
from .remover import FileRemover, NoneNoneAndPlaceHolderFilter
from .streaming import SpringfieldFiles
from .converter import AVConverter, ConversionTally, BagOutcome
