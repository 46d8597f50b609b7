# marketplace/utils.py
from flask import request

def split_list(value):
    """
    Splits a comma (or newline) separated form value into a clean list.
    Example:
        Input: "GPS, Bluetooth ,, A/C"
        Output: ['GPS', 'Bluetooth', 'A/C']
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    parts = value.replace('\n', ',').split(',')
    return [p.strip() for p in parts if p.strip()]

def arg_float(name):
    """Float query-string argument, or None when missing or malformed."""
    raw = request.args.get(name)
    if raw in (None, ''):
        return None
    try:
        return float(raw)
    except ValueError:
        return None

def payload():
    """JSON body when sent as JSON, form data otherwise."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()
