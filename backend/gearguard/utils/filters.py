from __future__ import annotations
from typing import Any, Dict
from gearguard.errors import ValidationError

def apply_filters(target, specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]):
    """Generic filter builder.

    specs: { param_name: { 'op': callable(target, value)->target, 'coerce': type/func, 'validate': callable(optional) } }

    ``target`` is whatever the ops fold over: a SQLAlchemy select, or a plain
    dict when building a structured filter object.
    """
    for name, meta in specs.items():
        if name not in params or params[name] in (None, ''):
            continue
        val = params[name]
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except (TypeError, ValueError):
                raise ValidationError(f'{name} invalid', meta={'field': name})
        if 'validate' in meta and not meta['validate'](val):
            raise ValidationError(f'{name} invalid', meta={'field': name})
        target = meta['op'](target, val)
    return target
