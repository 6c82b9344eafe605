"""
Loader Module - Read the class schedule CSV into Course records.
================================================================

The schedule export has a header line followed by one row per course section.
Columns are mapped by position onto the Course fields, so header wording may
vary between terms as long as the column order does not.
"""

from pathlib import Path
from typing import Union

import pandas as pd

from catalog_chat.shared.exceptions import ConfigurationError
from catalog_chat.shared.logging import get_logger
from catalog_chat.shared.schemas import COURSE_FIELDS, Course

logger = get_logger(__name__)


def read_header(csv_path: Path, encoding: str = "utf-8-sig") -> str:
    """Return the raw header line of the CSV file."""
    with open(csv_path, encoding=encoding) as f:
        return f.readline().rstrip("\r\n")


def courses_from_frame(df: pd.DataFrame) -> list[Course]:
    """
    Convert a schedule DataFrame into Course records.

    Args:
        df: Frame with at least as many columns as Course has fields

    Returns:
        Courses in row order; rows with no values at all are skipped

    Raises:
        ConfigurationError: If the frame has too few columns
    """
    if df.shape[1] < len(COURSE_FIELDS):
        raise ConfigurationError(
            f"Schedule has {df.shape[1]} columns, expected at least {len(COURSE_FIELDS)}"
        )

    df = df.iloc[:, : len(COURSE_FIELDS)].fillna("")

    courses = []
    for row in df.itertuples(index=False, name=None):
        values = [str(v).strip() for v in row]
        if not any(values):
            continue
        courses.append(Course(**dict(zip(COURSE_FIELDS, values))))
    return courses


def load_courses(
    csv_path: Union[str, Path],
    encoding: str = "utf-8-sig",
) -> tuple[str, list[Course]]:
    """
    Load the schedule CSV.

    Args:
        csv_path: Path to the CSV export
        encoding: File encoding (utf-8-sig strips a leading BOM)

    Returns:
        Tuple of (raw header line, courses)

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    path = Path(csv_path)
    if not path.is_file():
        raise ConfigurationError(f"Course data file not found: {path}")

    try:
        header = read_header(path, encoding=encoding)
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding=encoding)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ConfigurationError(f"Error reading course data from {path}: {e}") from e

    courses = courses_from_frame(df)
    logger.info(f"Loaded {len(courses)} courses from {path.name}")
    return header, courses
