from .database import (
    ConnectionConfig,
    ConnectResult,
    Database,
    PreparedStatement,
    open_database,
    register_driver,
)
from .dates import (
    Dayparts,
    epoch_to_cookie,
    epoch_to_rfc822,
    epoch_to_rfc3339,
    first_second_of_day,
    first_second_of_month,
    first_second_of_week_monday,
    first_second_of_week_sunday,
    first_second_of_year,
    log_timestamp_to_epoch,
    seconds_to_dayparts,
    seconds_to_dayparts_string,
    stamp,
)
from .exceptions import (
    DatabaseConfigError,
    DatabaseConnectError,
    DatabaseError,
    PicksetError,
    TimestampParseError,
)
from .files import FileRecord, get_directory_contents, scandir_chrono
from .log import configure_logging, remove_sink
from .text import (
    bytes_to_human,
    extract_cidrs,
    extract_cidrs6,
    extract_ips,
    extract_ips6,
    generate_id,
    pad_all,
    strip_comments,
    strip_trailing_slash,
)
from .util import DAY, HOUR, MINUTE

__all__ = [
    "Dayparts",
    "log_timestamp_to_epoch",
    "epoch_to_cookie",
    "epoch_to_rfc822",
    "epoch_to_rfc3339",
    "first_second_of_day",
    "first_second_of_month",
    "first_second_of_year",
    "first_second_of_week_monday",
    "first_second_of_week_sunday",
    "seconds_to_dayparts",
    "seconds_to_dayparts_string",
    "stamp",
    "bytes_to_human",
    "extract_cidrs",
    "extract_cidrs6",
    "extract_ips",
    "extract_ips6",
    "generate_id",
    "strip_comments",
    "pad_all",
    "strip_trailing_slash",
    "FileRecord",
    "get_directory_contents",
    "scandir_chrono",
    "ConnectionConfig",
    "ConnectResult",
    "Database",
    "PreparedStatement",
    "open_database",
    "register_driver",
    "configure_logging",
    "remove_sink",
    "PicksetError",
    "TimestampParseError",
    "DatabaseError",
    "DatabaseConfigError",
    "DatabaseConnectError",
    "MINUTE",
    "HOUR",
    "DAY",
]
