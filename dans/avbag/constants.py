"""
some constants for the AV bag preprocessor
"""

# namespaces used in the bag metadata
FILES_NS = "http://easy.dans.knaw.nl/schemas/bag/metadata/files/"
DCT_NS = "http://purl.org/dc/terms/"
DDM_NS = "http://schemas.dans.knaw.nl/dataset/ddm-v2/"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

# locations of the metadata documents, relative to the bag root
FILES_XML = "metadata/files.xml"
DATASET_XML = "metadata/dataset.xml"
PAYLOAD_DIR = "data"

# the rights value signifying that nobody may access or see a file
NONE_RIGHTS = "NONE"
ACCESSIBLE_TO_RIGHTS = "accessibleToRights"
VISIBLE_TO_RIGHTS = "visibleToRights"

# columns of the CSV file mapping file identifiers to their external copies
CSV_FILE_ID = "easy_file_id"
CSV_DARKARCHIVE_PATH = "path_in_AV_dir"
CSV_SPRINGFIELD_PATH = "path_in_springfield_dir"
CSV_DATASET_ID = "dataset_id"
CSV_REQUIRED_COLUMNS = (CSV_FILE_ID, CSV_DARKARCHIVE_PATH, CSV_SPRINGFIELD_PATH)

# bag-info.txt properties maintained for successor bags
IS_VERSION_OF = "Is-Version-Of"
CREATED = "Created"
BASE_ID_PREFIX = "Base-"
BASE_ID_TYPES = ("DOI", "URN")
VERSION_OF_URI_PREFIX = "urn:uuid:"

# added to the name of a streaming copy that would otherwise clash with its placeholder
STREAMING_SUFFIX = "-streaming"
