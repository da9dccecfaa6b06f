"""Constants for the S3 read/write exporter."""

# Probe operations, in cycle order
OP_UPLOAD = "upload"
OP_MULTIPART_UPLOAD = "multipart_upload"
OP_DELETE = "delete"
OP_RESTORE = "restore"
OP_DOWNLOAD = "download"

ALL_OPERATIONS = (
    OP_UPLOAD,
    OP_MULTIPART_UPLOAD,
    OP_DELETE,
    OP_RESTORE,
    OP_DOWNLOAD,
)

# Error kinds
ERROR_KIND_TRANSPORT = "transport"
ERROR_KIND_MISMATCH = "mismatch"
ERROR_KIND_RESTORE_WITHOUT_VERSION = "restore_without_version"
ERROR_KIND_UNEXPECTED = "unexpected"

# Error labels
ERROR_LABEL_CONTENT_MISMATCH = "content_mismatch"
ERROR_LABEL_RESTORE_WITHOUT_VERSION = "restore_without_version"
ERROR_LABEL_TIMEOUT = "timeout"

# Multipart upload
MIB = 1024 * 1024
DEFAULT_MULTIPART_PART_SIZE = 5 * MIB
MIN_MULTIPART_PART_SIZE = 5 * MIB
DEFAULT_MULTIPART_CONCURRENCY = 5

# Exporter
DEFAULT_NAMESPACE = "s3rw"
DEFAULT_LOG_LEVEL = "info"
HEALTH_PATH = "/healthz"
READY_PATH = "/readyz"

# S3 specifics
DEFAULT_REGION = "us-east-1"
NULL_VERSION_ID = "null"
BUCKET_EXISTS_CODES = ("BucketAlreadyExists", "BucketAlreadyOwnedByYou")
NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound", "NoSuchVersion")

SERVICE_NAME = "s3rw-exporter"
