"""
Field Processor Module

Decodes Notion database properties into flat values.

Every extractor takes a record's properties mapping and a property name and
returns a plain value. Extractors are total: a missing property, a null, or a
value of the wrong type anywhere along the path yields the documented default
instead of an error, so one malformed property never stops a record from
being processed.

Property shapes handled (under properties[name]):
    title           .title[0].text.content                  default "No Name"
    status          .status.name                            default "No Status"
    float / int     .number                                 default ""
    text            .rich_text[0].plain_text                default ""
    select          .select.name                            default ""
    multi_select    .multi_select[*].name                   default []
    date            .date.start (YYYY-MM-DD -> MM/DD/YYYY)  default ""
    url             .url                                    default ""
    email           .email                                  default ""
    phone           .phone_number                           default ""
    formula_text    properties[name + " (As Text)"].formula.string
    formula_number  .formula.number                         default 0.0
    rollup_text     .rollup.array[*].rich_text[0].plain_text  default [""]
    rollup_formula  .rollup.array[*].formula.string (first) default ""
"""

from __future__ import annotations
import logging
import math
import re
from datetime import datetime
from typing import Optional, Dict, Any, List, Callable, Tuple, Union

from common.config import ConfigurationError

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_NAME = "No Name"
DEFAULT_STATUS = "No Status"
FORMULA_TEXT_SUFFIX = " (As Text)"

_ISO_DATE = re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$')

ExtractedValue = Union[str, float, List[str]]


# --- safe navigation ---------------------------------------------------------

def get_object(container: Any, key: str) -> Optional[Dict[str, Any]]:
    """Return container[key] if container is a mapping and the value is a mapping"""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    return value if isinstance(value, dict) else None


def get_array(container: Any, key: str) -> Optional[List[Any]]:
    """Return container[key] if container is a mapping and the value is a list"""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    return value if isinstance(value, list) else None


def get_string(container: Any, key: str) -> Optional[str]:
    """Return container[key] if container is a mapping and the value is a string"""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    return value if isinstance(value, str) else None


def get_number(container: Any, key: str) -> Optional[float]:
    """Return container[key] as float if it is a finite JSON number (bools excluded)"""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number: float = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def first_object(items: Optional[List[Any]]) -> Optional[Dict[str, Any]]:
    """Return the first element of a list if it is a mapping"""
    if not items:
        return None
    first = items[0]
    return first if isinstance(first, dict) else None


def get_properties(record: Any) -> Dict[str, Any]:
    """Return a record's properties mapping, or an empty mapping"""
    return get_object(record, 'properties') or {}


# --- extractors ----------------------------------------------------------------

def get_name(props: Dict[str, Any], key: str) -> str:
    """Title property: first title fragment's text content"""
    text = get_object(first_object(get_array(get_object(props, key), 'title')), 'text')
    content = get_string(text, 'content')
    return content if content is not None else DEFAULT_NAME


def get_status(props: Dict[str, Any], key: str) -> str:
    name = get_string(get_object(get_object(props, key), 'status'), 'name')
    return name if name is not None else DEFAULT_STATUS


def get_float_value(props: Dict[str, Any], key: str) -> str:
    """Number property formatted with two decimals"""
    number = get_number(get_object(props, key), 'number')
    return f"{number:.2f}" if number is not None else ""


def get_int_value(props: Dict[str, Any], key: str) -> str:
    """Number property truncated toward zero"""
    number = get_number(get_object(props, key), 'number')
    return str(int(number)) if number is not None else ""


def get_plain_text_value(props: Dict[str, Any], key: str) -> str:
    text = get_string(first_object(get_array(get_object(props, key), 'rich_text')), 'plain_text')
    return text if text is not None else ""


def get_clean_plain_text_value(props: Dict[str, Any], key: str) -> str:
    return get_plain_text_value(props, key).strip()


def get_select_value(props: Dict[str, Any], key: str) -> str:
    # an unset select arrives as "select": null
    name = get_string(get_object(get_object(props, key), 'select'), 'name')
    return name if name is not None else ""


def get_multi_select_strings(props: Dict[str, Any], key: str) -> List[str]:
    """All option names of a multi-select property, in order"""
    options = get_array(get_object(props, key), 'multi_select') or []
    values: List[str] = []
    for option in options:
        name = get_string(option, 'name')
        if name is not None:
            values.append(name)
    return values


def get_date_value(props: Dict[str, Any], key: str) -> str:
    """
    Date property start as MM/DD/YYYY

    A start value that is not a plain YYYY-MM-DD date (e.g. a datetime) is
    returned unchanged.
    """
    start = get_string(get_object(get_object(props, key), 'date'), 'start')
    if not start:
        return ""

    if _ISO_DATE.match(start):
        try:
            return datetime.strptime(start, '%Y-%m-%d').strftime('%m/%d/%Y')
        except ValueError:
            pass

    logger.debug(f"Could not parse date for {key}: {start}")
    return start


def get_url_value(props: Dict[str, Any], key: str) -> str:
    url = get_string(get_object(props, key), 'url')
    return url if url is not None else ""


def get_clean_url(props: Dict[str, Any], key: str) -> str:
    return get_url_value(props, key).strip()


def get_clean_email_value(props: Dict[str, Any], key: str) -> str:
    email = get_string(get_object(props, key), 'email')
    return email.strip() if email is not None else ""


def get_phone_number_value(props: Dict[str, Any], key: str) -> str:
    phone_number = get_string(get_object(props, key), 'phone_number')
    return phone_number.strip() if phone_number is not None else ""


def get_formula_text_value(props: Dict[str, Any], key: str) -> str:
    """String result of the companion "<key> (As Text)" formula property"""
    lookup_key: str = key + FORMULA_TEXT_SUFFIX
    text = get_string(get_object(get_object(props, lookup_key), 'formula'), 'string')
    return text if text is not None else ""


def get_formula_number_value(props: Dict[str, Any], key: str) -> float:
    number = get_number(get_object(get_object(props, key), 'formula'), 'number')
    return number if number is not None else 0.0


def get_rollup_plain_text(props: Dict[str, Any], key: str) -> List[str]:
    """
    First plain_text of every rolled-up rich_text item

    Returns [""] when nothing could be extracted, whether the rollup array is
    empty or missing altogether.
    """
    items = get_array(get_object(get_object(props, key), 'rollup'), 'array')
    if not items:
        return [""]

    values: List[str] = []
    for item in items:
        text = get_string(first_object(get_array(item, 'rich_text')), 'plain_text')
        if text is not None:
            values.append(text)

    return values if values else [""]


def get_rollup_formula_string(props: Dict[str, Any], key: str) -> str:
    """String of the first rolled-up item that carries a formula string"""
    items = get_array(get_object(get_object(props, key), 'rollup'), 'array') or []
    for item in items:
        text = get_string(get_object(item, 'formula'), 'string')
        if text is not None:
            return text
    return ""


FIELD_EXTRACTORS: Dict[str, Callable[[Dict[str, Any], str], ExtractedValue]] = {
    'title': get_name,
    'status': get_status,
    'float': get_float_value,
    'int': get_int_value,
    'text': get_plain_text_value,
    'clean_text': get_clean_plain_text_value,
    'select': get_select_value,
    'multi_select': get_multi_select_strings,
    'date': get_date_value,
    'url': get_url_value,
    'clean_url': get_clean_url,
    'email': get_clean_email_value,
    'phone': get_phone_number_value,
    'formula_text': get_formula_text_value,
    'formula_number': get_formula_number_value,
    'rollup_text': get_rollup_plain_text,
    'rollup_formula': get_rollup_formula_string,
}


class FieldProcessor:
    """
    Builds flattened rows from database records using config-driven mappings

    Mapping format in config:
        column = Property Name:kind

    kind is one of the FIELD_EXTRACTORS keys. List values are joined with
    list_separator so every column holds a scalar.
    """

    def __init__(self, field_mappings: Dict[str, Tuple[str, str]], list_separator: str = "; ") -> None:
        unknown: List[str] = [f"{column} ({kind})" for column, (_, kind) in field_mappings.items()
                              if kind not in FIELD_EXTRACTORS]
        if unknown:
            raise ConfigurationError(f"Unknown field kinds: {', '.join(unknown)}. "
                             f"Valid: {', '.join(sorted(FIELD_EXTRACTORS))}")

        self.field_mappings: Dict[str, Tuple[str, str]] = dict(field_mappings)
        self.list_separator: str = list_separator

        logger.info(f"FieldProcessor initialised with {len(self.field_mappings)} field mappings")

    @property
    def columns(self) -> List[str]:
        return list(self.field_mappings)

    def extract_field(self, props: Dict[str, Any], property_name: str, kind: str) -> Union[str, float]:
        value: ExtractedValue = FIELD_EXTRACTORS[kind](props, property_name)
        if isinstance(value, list):
            return self.list_separator.join(value)
        return value

    def extract_all_fields(self, record: Dict[str, Any]) -> Dict[str, Union[str, float]]:
        """Extract every mapped column from one record"""
        props: Dict[str, Any] = get_properties(record)
        return {
            column: self.extract_field(props, property_name, kind)
            for column, (property_name, kind) in self.field_mappings.items()
        }

    def extract_records(self, records: List[Dict[str, Any]]) -> List[Dict[str, Union[str, float]]]:
        rows: List[Dict[str, Union[str, float]]] = [self.extract_all_fields(record) for record in records]
        logger.debug(f"Extracted {len(rows)} rows")
        return rows
