import jsonpickle
from datetime import datetime, timezone


def now() -> str:
    return datetime.now(timezone.utc).isoformat()


def sort_dict_keys(d):
    """Recursively sort dictionary keys and handle nested structures.

    Args:
        d: Data structure (dict, list, or primitive type)

    Returns:
        Sorted version of the data structure
    """
    if isinstance(d, dict):
        return {key: sort_dict_keys(value) for key, value in sorted(d.items())}
    elif isinstance(d, list):
        return [sort_dict_keys(item) for item in d]
    else:
        return d


def canonicalize_dict(data):
    """
    Returns a canonical JSON representation of a dictionary.

    The JSON string uses sorted keys, which ensures that the representation of
    the dictionary remains consistent even when key order varies.
    """
    return jsonpickle.dumps(sort_dict_keys(data), unpicklable=False)


def to_plain_dict(data):
    """Recursively convert kubernetes models nested in `data` to dictionaries."""
    if hasattr(data, "to_dict"):
        return data.to_dict()
    elif isinstance(data, dict):
        return {key: to_plain_dict(value) for key, value in data.items()}
    elif isinstance(data, (list, tuple)):
        return [to_plain_dict(item) for item in data]
    else:
        return data
