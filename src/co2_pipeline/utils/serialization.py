# Contains utility functions for serialization, e.g., to JSON.
import json
from datetime import date, datetime

import numpy as np
from pydantic import BaseModel


class CustomJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, BaseModel):
            return obj.model_dump()
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super(CustomJSONEncoder, self).default(obj)


def to_json(obj, indent: int = 4) -> str:
    if isinstance(obj, BaseModel):
        obj = obj.model_dump()
    return json.dumps(obj, cls=CustomJSONEncoder, indent=indent)
